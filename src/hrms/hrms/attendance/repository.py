from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        account_id: int,
        employee_id: str,
        work_date: date,
        check_in: datetime,
        status: AttendanceStatus,
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def set_checkin(self, attendance_id: int, *, check_in: datetime, status: AttendanceStatus, updated_by: int) -> bool:
        """Fill the check-in of a day row that exists without one (e.g. pre-marked absent)."""

        raise NotImplementedError

    def set_checkout(self, attendance_id: int, *, check_out: datetime, total_minutes: int, updated_by: int) -> bool:
        raise NotImplementedError

    def admin_update(
        self,
        attendance_id: int,
        *,
        status: Optional[AttendanceStatus],
        notes: Optional[str],
        updated_by: int,
    ) -> bool:
        raise NotImplementedError

    def list_for_range(
        self,
        *,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int,
    ) -> Sequence[AttendanceRecord]:
        """Newest first; every filter is optional."""

        raise NotImplementedError
