from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One row per (employee, calendar day)."""

    attendance_id: int
    account_id: int
    employee_id: str
    work_date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    total_minutes: int
    status: AttendanceStatus
    notes: Optional[str] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def worked_minutes(check_in: datetime, check_out: datetime) -> int:
    """Whole minutes between check-in and check-out, not below 0."""
    return max(int((check_out - check_in).total_seconds() // 60), 0)
