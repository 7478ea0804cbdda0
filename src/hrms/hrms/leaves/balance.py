"""Remaining leave allowance for one employee and year."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveAllowance, LeaveRequest, inclusive_days


@dataclass(frozen=True)
class LeaveBalance:
    remaining: Mapping[LeaveType, float]
    used: Mapping[LeaveType, float]
    year: int

    def remaining_for(self, leave_type: LeaveType) -> float:
        return self.remaining[leave_type]

    def to_dict(self) -> dict:
        return {
            "balance": {**{t.value: self.remaining[t] for t in LeaveType}, "year": self.year},
            "used_leaves": {t.value: self.used[t] for t in LeaveType if self.used[t]},
        }


def used_days_by_type(leaves: Iterable[LeaveRequest], *, year: int) -> dict[LeaveType, float]:
    """Sum inclusive day spans of approved leaves starting in ``year``."""

    used = {t: 0.0 for t in LeaveType}
    for leave in leaves:
        if leave.status != LeaveStatus.APPROVED or leave.start_date.year != year:
            continue
        used[leave.leave_type] += inclusive_days(leave.start_date, leave.end_date)
    return used


def compute_balance(allowance: LeaveAllowance, leaves: Iterable[LeaveRequest], *, year: int) -> LeaveBalance:
    """remaining = max(0, allowance - ceil(used)) for every leave type."""

    used = used_days_by_type(leaves, year=year)
    remaining = {t: max(0, allowance.for_type(t) - math.ceil(used[t])) for t in LeaveType}
    return LeaveBalance(remaining=remaining, used=used, year=year)
