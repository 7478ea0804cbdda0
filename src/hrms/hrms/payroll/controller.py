from __future__ import annotations

from flask import Flask, request

from ..common.responses import json_body, ok
from ..common.validators import RequestValidator
from ..core.constants import API_PREFIX
from ..container import Container
from .model import PayComponents

PREFIX = f"{API_PREFIX}/payroll"

_COMPONENTS = (
    ("hra", "HRA must be a number"),
    ("allowances", "Allowances must be a number"),
    ("deductions", "Deductions must be a number"),
)


def _period_args(v: RequestValidator):
    month = v.integer("month", "Month must be between 1 and 12", min_value=1, max_value=12, optional=True)
    year = v.integer("year", "Invalid year", min_value=2020, optional=True)
    return month, year


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    payroll = container.payroll_service

    @app.route(f"{PREFIX}/me", methods=["GET"], endpoint="payroll_me")
    @guards.login_required
    def my_payroll(identity):
        v = RequestValidator(request.args)
        month, year = _period_args(v)
        v.raise_if_invalid()
        return ok(payrolls=payroll.list_mine(identity, month=month, year=year))

    @app.route(PREFIX, methods=["GET"], endpoint="payroll_all")
    @guards.elevated_required
    def all_payroll(identity):
        v = RequestValidator(request.args)
        month, year = _period_args(v)
        v.raise_if_invalid()
        records = payroll.list_all(
            identity, employee_id=request.args.get("employee_id") or None, month=month, year=year
        )
        return ok(payrolls=records)

    @app.route(PREFIX, methods=["POST"], endpoint="payroll_create")
    @guards.elevated_required
    def create_payroll(identity):
        v = RequestValidator(json_body())
        employee_id = v.required("employee_id", "Employee ID is required")
        month = v.integer("month", "Month must be between 1 and 12", min_value=1, max_value=12)
        year = v.integer("year", "Invalid year", min_value=2020)
        basic = v.number("basic", "Basic salary must be a number")
        extras = {field: v.number(field, message, optional=True) for field, message in _COMPONENTS}
        v.raise_if_invalid()

        pay = PayComponents(basic=basic, **{k: val for k, val in extras.items() if val is not None})
        record = payroll.create(identity, employee_id=employee_id, month=month, year=year, pay=pay)
        return ok("Payroll created", status_code=201, payroll=record)

    @app.route(f"{PREFIX}/<int:payroll_id>", methods=["PUT"], endpoint="payroll_update")
    @guards.elevated_required
    def update_payroll(identity, payroll_id: int):
        v = RequestValidator(json_body())
        basic = v.number("basic", "Basic salary must be a number", optional=True)
        extras = {field: v.number(field, message, optional=True) for field, message in _COMPONENTS}
        v.raise_if_invalid()

        record = payroll.update(identity, payroll_id, basic=basic, **extras)
        return ok("Payroll updated", payroll=record)

    @app.route(f"{PREFIX}/generate", methods=["POST"], endpoint="payroll_generate")
    @guards.admin_required
    def generate_payroll(identity):
        v = RequestValidator(json_body())
        month = v.integer("month", "Month must be between 1 and 12", min_value=1, max_value=12)
        year = v.integer("year", "Invalid year", min_value=2020)
        v.raise_if_invalid()

        counts = payroll.generate(identity, month=month, year=year)
        return ok(f"Payroll generated for {month:02d}/{year}", **counts)
