from __future__ import annotations

from datetime import date

from flask import Flask, request

from ..common.responses import ok
from ..common.validators import RequestValidator
from ..core.constants import API_PREFIX
from ..core.enums import LeaveType
from ..container import Container
from .csv_export import rows_to_csv
from .service import ReportData

PREFIX = f"{API_PREFIX}/reports"


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    reports = container.report_service

    def _csv_response(data: ReportData, name: str):
        filename = f"{name}_report_{date.today().strftime('%Y%m%d')}.csv"
        return app.response_class(
            rows_to_csv(data.rows, data.columns),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    def _attendance(identity) -> ReportData:
        v = RequestValidator(request.args)
        start = v.iso_date("start_date", "Valid start date is required", optional=True)
        end = v.iso_date("end_date", "Valid end date is required", optional=True)
        v.raise_if_invalid()
        return reports.attendance_report(
            identity, employee_id=request.args.get("employee_id") or None, start_date=start, end_date=end
        )

    def _leaves(identity) -> ReportData:
        v = RequestValidator(request.args)
        leave_type = v.one_of("leave_type", LeaveType, "Invalid leave type", optional=True)
        start = v.iso_date("start_date", "Valid start date is required", optional=True)
        end = v.iso_date("end_date", "Valid end date is required", optional=True)
        v.raise_if_invalid()
        return reports.leave_report(
            identity,
            employee_id=request.args.get("employee_id") or None,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
        )

    def _payroll(identity) -> ReportData:
        v = RequestValidator(request.args)
        month = v.integer("month", "Month must be between 1 and 12", min_value=1, max_value=12, optional=True)
        year = v.integer("year", "Invalid year", optional=True)
        v.raise_if_invalid()
        return reports.payroll_report(
            identity, employee_id=request.args.get("employee_id") or None, month=month, year=year
        )

    @app.route(f"{PREFIX}/attendance", methods=["GET"], endpoint="reports_attendance")
    @guards.elevated_required
    def attendance_report(identity):
        data = _attendance(identity)
        return ok(records=data.rows, stats=data.stats)

    @app.route(f"{PREFIX}/attendance.csv", methods=["GET"], endpoint="reports_attendance_csv")
    @guards.elevated_required
    def attendance_report_csv(identity):
        return _csv_response(_attendance(identity), "attendance")

    @app.route(f"{PREFIX}/leaves", methods=["GET"], endpoint="reports_leaves")
    @guards.elevated_required
    def leave_report(identity):
        data = _leaves(identity)
        return ok(leaves=data.rows, stats=data.stats)

    @app.route(f"{PREFIX}/leaves.csv", methods=["GET"], endpoint="reports_leaves_csv")
    @guards.elevated_required
    def leave_report_csv(identity):
        return _csv_response(_leaves(identity), "leaves")

    @app.route(f"{PREFIX}/payroll", methods=["GET"], endpoint="reports_payroll")
    @guards.elevated_required
    def payroll_report(identity):
        data = _payroll(identity)
        return ok(payrolls=data.rows, stats=data.stats)

    @app.route(f"{PREFIX}/payroll.csv", methods=["GET"], endpoint="reports_payroll_csv")
    @guards.elevated_required
    def payroll_report_csv(identity):
        return _csv_response(_payroll(identity), "payroll")

    @app.route(f"{PREFIX}/employees", methods=["GET"], endpoint="reports_employees")
    @guards.elevated_required
    def employee_report(identity):
        data = reports.employee_report(identity)
        return ok(employees=data.rows, stats=data.stats)

    @app.route(f"{PREFIX}/employees.csv", methods=["GET"], endpoint="reports_employees_csv")
    @guards.elevated_required
    def employee_report_csv(identity):
        return _csv_response(reports.employee_report(identity), "employees")

    @app.route(f"{PREFIX}/employee-summary", methods=["GET"], endpoint="reports_employee_summary")
    @guards.elevated_required
    def employee_summary(identity):
        return ok(**reports.employee_summary(identity, request.args.get("employee_id")))
