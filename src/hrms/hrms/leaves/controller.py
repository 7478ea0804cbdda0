from __future__ import annotations

from flask import Flask, request

from ..common.responses import json_body, ok
from ..common.validators import RequestValidator
from ..core.constants import API_PREFIX
from ..core.enums import LeaveStatus, LeaveType
from ..container import Container
from .service import leave_to_dict

PREFIX = f"{API_PREFIX}/leaves"


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    leaves = container.leave_service

    @app.route(PREFIX, methods=["POST"], endpoint="leaves_apply")
    @guards.login_required
    def apply_leave(identity):
        v = RequestValidator(json_body())
        leave_type = v.one_of("leave_type", LeaveType, "Invalid leave type")
        start = v.iso_datetime("start_date", "Valid start date is required")
        end = v.iso_datetime("end_date", "Valid end date is required")
        remarks = v.optional_str("remarks")
        v.raise_if_invalid()

        leave = leaves.apply(identity, leave_type=leave_type, start_date=start, end_date=end, remarks=remarks)
        return ok("Leave request submitted", status_code=201, leave=leave_to_dict(leave))

    @app.route(f"{PREFIX}/me", methods=["GET"], endpoint="leaves_me")
    @guards.login_required
    def my_leaves(identity):
        return ok(leaves=[leave_to_dict(leave) for leave in leaves.list_mine(identity)])

    @app.route(PREFIX, methods=["GET"], endpoint="leaves_all")
    @guards.elevated_required
    def all_leaves(identity):
        v = RequestValidator(request.args)
        status = v.one_of("status", LeaveStatus, "Invalid status", optional=True)
        v.raise_if_invalid()
        return ok(leaves=leaves.list_all(identity, status=status))

    @app.route(f"{PREFIX}/<int:leave_id>", methods=["PUT"], endpoint="leaves_decide")
    @guards.elevated_required
    def decide_leave(identity, leave_id: int):
        v = RequestValidator(json_body())
        status = v.one_of(
            "status",
            LeaveStatus,
            "Status must be approved or rejected",
            allowed=(LeaveStatus.APPROVED, LeaveStatus.REJECTED),
        )
        admin_remarks = v.optional_str("admin_remarks")
        comment = v.optional_str("comment")
        v.raise_if_invalid()

        leave = leaves.decide(identity, leave_id, status=status, comment=admin_remarks or comment)
        return ok(f"Leave {status.value}", leave=leave_to_dict(leave))
