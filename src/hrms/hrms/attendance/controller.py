from __future__ import annotations

from flask import Flask, request

from ..common.responses import json_body, ok
from ..common.validators import RequestValidator
from ..core.constants import API_PREFIX
from ..core.enums import AttendanceStatus
from ..container import Container

PREFIX = f"{API_PREFIX}/attendance"


def _range_args():
    v = RequestValidator(request.args)
    start = v.iso_date("start_date", "Valid start date is required", optional=True)
    end = v.iso_date("end_date", "Valid end date is required", optional=True)
    v.raise_if_invalid()
    return start, end


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    attendance = container.attendance_service

    @app.route(f"{PREFIX}/check-in", methods=["POST"], endpoint="attendance_check_in")
    @guards.login_required
    def check_in(identity):
        return ok("Checked in successfully", attendance=attendance.check_in(identity))

    @app.route(f"{PREFIX}/check-out", methods=["POST"], endpoint="attendance_check_out")
    @guards.login_required
    def check_out(identity):
        return ok("Checked out successfully", attendance=attendance.check_out(identity))

    @app.route(f"{PREFIX}/me", methods=["GET"], endpoint="attendance_me")
    @guards.login_required
    def my_attendance(identity):
        start, end = _range_args()
        return ok(attendance=attendance.list_mine(identity, start_date=start, end_date=end))

    @app.route(PREFIX, methods=["GET"], endpoint="attendance_all")
    @guards.elevated_required
    def all_attendance(identity):
        start, end = _range_args()
        records = attendance.list_all(
            identity,
            employee_id=request.args.get("employee_id") or None,
            start_date=start,
            end_date=end,
        )
        return ok(attendance=records)

    @app.route(f"{PREFIX}/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @guards.elevated_required
    def update_attendance(identity, attendance_id: int):
        v = RequestValidator(json_body())
        status = v.one_of("status", AttendanceStatus, "Invalid status", optional=True)
        notes = v.optional_str("notes")
        v.raise_if_invalid()

        record = attendance.admin_update(identity, attendance_id, status=status, notes=notes)
        return ok("Attendance updated", attendance=record)
