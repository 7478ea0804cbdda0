"""HRMS package.

Feature modules (auth, profiles, attendance, leaves, payroll, notifications,
reports) each hold a thin Flask controller over service and repository layers.
"""
