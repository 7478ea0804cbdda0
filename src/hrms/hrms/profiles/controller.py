from __future__ import annotations

from typing import Any, Mapping, Optional

from flask import Flask

from ..common.responses import json_body, ok
from ..common.validators import RequestValidator
from ..core.constants import API_PREFIX
from ..core.enums import LeaveType
from ..container import Container
from .model import EmergencyContact, profile_to_dict

PREFIX = f"{API_PREFIX}/profiles"


def _nested(v: RequestValidator, data: Mapping[str, Any], field: str) -> Optional[dict]:
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, dict):
        v.errors.append({"field": field, "message": "Must be an object"})
        return None
    return value


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    profiles = container.profile_service
    balances = container.leave_balance_service

    @app.route(PREFIX, methods=["POST"], endpoint="profiles_create")
    @guards.login_required
    def create_profile(identity):
        v = RequestValidator(json_body())
        first_name = v.required("first_name", "First name is required")
        last_name = v.required("last_name", "Last name is required")
        job_title = v.required("job_title", "Job title is required")
        department = v.required("department", "Department is required")
        joining_date = v.iso_date("joining_date", "Valid joining date is required")
        basic_salary = v.number("basic_salary", "Basic salary must be a number")
        phone = v.optional_str("phone")
        address = v.optional_str("address")
        contact = EmergencyContact(
            name=v.optional_str("emergency_contact_name"),
            relationship=v.optional_str("emergency_contact_relationship"),
            phone=v.optional_str("emergency_contact_phone"),
        )
        v.raise_if_invalid()

        profile = profiles.create(
            identity,
            first_name=first_name,
            last_name=last_name,
            job_title=job_title,
            department=department,
            joining_date=joining_date,
            basic_salary=basic_salary,
            phone=phone,
            address=address,
            emergency_contact=contact,
        )
        return ok("Profile created successfully", status_code=201, profile=profile_to_dict(profile))

    @app.route(f"{PREFIX}/me", methods=["GET"], endpoint="profiles_me")
    @guards.login_required
    def get_my_profile(identity):
        return ok(profile=profile_to_dict(profiles.get_mine(identity)))

    @app.route(f"{PREFIX}/me", methods=["PUT"], endpoint="profiles_update_me")
    @guards.login_required
    def update_my_profile(identity):
        data = json_body()
        v = RequestValidator(data)
        basic = {}
        for field in ("first_name", "last_name", "phone", "address"):
            if v.present(field):
                basic[field] = v.optional_str(field)

        job_details = _nested(v, data, "job_details")
        if job_details is not None and "joining_date" in job_details:
            inner = RequestValidator(job_details)
            job_details = dict(job_details)
            job_details["joining_date"] = inner.iso_date("joining_date", "Valid joining date is required", optional=True)
            v.errors.extend({"field": f"job_details.{e['field']}", "message": e["message"]} for e in inner.errors)
        emergency = _nested(v, data, "emergency_contact")
        v.raise_if_invalid()

        profile = profiles.update_mine(identity, basic=basic, job_details=job_details, emergency_contact=emergency)
        return ok("Profile updated successfully", profile=profile_to_dict(profile))

    @app.route(f"{PREFIX}/me/documents", methods=["POST"], endpoint="profiles_add_document")
    @guards.login_required
    def add_document(identity):
        v = RequestValidator(json_body())
        doc_type = v.required("type", "Document type is required")
        url = v.required("url", "Document URL is required")
        v.raise_if_invalid()

        profile = profiles.add_document(identity, doc_type=doc_type, url=url)
        return ok("Document added successfully", status_code=201, profile=profile_to_dict(profile))

    @app.route(f"{PREFIX}/employees", methods=["GET"], endpoint="profiles_employees")
    @guards.elevated_required
    def list_employees(identity):
        return ok(employees=profiles.list_employees(identity))

    @app.route(f"{PREFIX}/employees/<employee_id>", methods=["GET"], endpoint="profiles_employee")
    @guards.elevated_required
    def get_employee(identity, employee_id: str):
        return ok(employee=profiles.get_employee(identity, employee_id))

    @app.route(f"{PREFIX}/employees/<employee_id>", methods=["PUT"], endpoint="profiles_update_employee")
    @guards.elevated_required
    def update_employee(identity, employee_id: str):
        v = RequestValidator(json_body())
        changes = {}
        for field in ("first_name", "last_name", "phone", "address", "job_title", "department"):
            if v.present(field):
                changes[field] = v.optional_str(field)
        for field, label in (
            ("basic_salary", "Basic salary"),
            ("hra", "HRA"),
            ("allowances", "Allowances"),
            ("deductions", "Deductions"),
        ):
            if v.present(field):
                changes[field] = v.number(field, f"{label} must be a number")
        v.raise_if_invalid()

        profile = profiles.update_employee(identity, employee_id, changes)
        return ok("Employee updated successfully", employee=profile_to_dict(profile))

    @app.route(f"{PREFIX}/employees/<employee_id>/audit", methods=["GET"], endpoint="profiles_employee_audit")
    @guards.elevated_required
    def employee_audit(identity, employee_id: str):
        return ok(audit=profiles.audit_trail(identity, employee_id))

    @app.route(f"{PREFIX}/leave-balance", methods=["GET"], endpoint="profiles_leave_balance")
    @guards.login_required
    def leave_balance(identity):
        return ok(**balances.get_balance(identity).to_dict())

    @app.route(f"{PREFIX}/leave-balance/<employee_id>", methods=["PUT"], endpoint="profiles_update_leave_balance")
    @guards.elevated_required
    def update_leave_balance(identity, employee_id: str):
        v = RequestValidator(json_body())
        leave_type = v.one_of("leave_type", LeaveType, "Invalid leave type")
        days = v.number("balance", "Balance must be a number")
        v.raise_if_invalid()

        allowance = balances.update_allowance(identity, employee_id, leave_type=leave_type, days=days)
        return ok("Leave balance updated successfully", balance=allowance.to_dict())
