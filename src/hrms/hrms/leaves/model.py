from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional

from ..core.enums import LeaveStatus, LeaveType

DEFAULT_ALLOWANCE_DAYS: Mapping[LeaveType, int] = {
    LeaveType.SICK: 12,
    LeaveType.CASUAL: 12,
    LeaveType.ANNUAL: 21,
    LeaveType.MATERNITY: 180,
    LeaveType.PATERNITY: 15,
}


def inclusive_days(start: datetime, end: datetime) -> float:
    """Whole-day span counting both ends; time-of-day parts leave a fraction."""
    return (end - start).total_seconds() / 86400 + 1


@dataclass(frozen=True)
class LeaveAllowance:
    """Annual per-type quota, tagged with the year it took effect."""

    days: Mapping[LeaveType, float]
    year: int

    @classmethod
    def default(cls, year: int) -> "LeaveAllowance":
        return cls(days=dict(DEFAULT_ALLOWANCE_DAYS), year=year)

    @classmethod
    def from_dict(cls, data: Mapping) -> "LeaveAllowance":
        days = {t: data.get(t.value, DEFAULT_ALLOWANCE_DAYS[t]) for t in LeaveType}
        return cls(days=days, year=int(data.get("year", 0)))

    def for_type(self, leave_type: LeaveType) -> float:
        return self.days.get(leave_type, DEFAULT_ALLOWANCE_DAYS[leave_type])

    def with_days(self, leave_type: LeaveType, days: float) -> "LeaveAllowance":
        updated = dict(self.days)
        updated[leave_type] = days
        return LeaveAllowance(days=updated, year=self.year)

    def to_dict(self) -> dict:
        out: dict = {t.value: self.for_type(t) for t in LeaveType}
        out["year"] = self.year
        return out


@dataclass(frozen=True)
class LeaveHistoryEntry:
    action: str
    actor_id: int
    comment: Optional[str]
    timestamp: datetime


@dataclass(frozen=True)
class LeaveRequest:
    leave_id: int
    account_id: int
    employee_id: str
    leave_type: LeaveType
    start_date: datetime
    end_date: datetime
    status: LeaveStatus
    remarks: Optional[str] = None
    approver_id: Optional[int] = None
    approver_comment: Optional[str] = None
    admin_remarks: Optional[str] = None
    salary_deduction: float = 0.0
    deduction_reason: Optional[str] = None
    created_by: Optional[int] = None
    history: tuple[LeaveHistoryEntry, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def days(self) -> int:
        return math.ceil(inclusive_days(self.start_date, self.end_date))
