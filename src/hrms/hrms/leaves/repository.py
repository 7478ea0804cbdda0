from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveHistoryEntry, LeaveRequest


class LeaveRepository(Protocol):
    def create(
        self,
        *,
        account_id: int,
        employee_id: str,
        leave_type: LeaveType,
        start_date: datetime,
        end_date: datetime,
        remarks: Optional[str],
        salary_deduction: float,
        deduction_reason: Optional[str],
        created_by: int,
        applied: LeaveHistoryEntry,
    ) -> int:
        raise NotImplementedError

    def get(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: str, *, limit: int) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_all(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[str] = None,
        leave_type: Optional[LeaveType] = None,
        starts_on_or_after: Optional[date] = None,
        ends_on_or_before: Optional[date] = None,
        limit: int,
    ) -> Sequence[LeaveRequest]:
        """Newest first; the date bounds compare calendar days, ignoring time of day."""

        raise NotImplementedError

    def list_approved_in_year(self, employee_id: str, year: int) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def record_decision(
        self,
        leave_id: int,
        *,
        expected: LeaveStatus,
        entry: LeaveHistoryEntry,
        status: LeaveStatus,
    ) -> bool:
        """Set the decision only while the stored status is still ``expected``.

        Appends ``entry`` to the history in the same transaction. Returns False
        when another decision got there first.
        """

        raise NotImplementedError
