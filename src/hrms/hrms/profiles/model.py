from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.serializers import to_json
from ..leaves.model import LeaveAllowance


@dataclass(frozen=True)
class JobDetails:
    title: str
    department: str
    joining_date: Optional[date] = None
    employment_type: str = "full-time"


@dataclass(frozen=True)
class SalaryStructure:
    basic: float
    hra: float = 0.0
    allowances: float = 0.0
    deductions: float = 0.0


@dataclass(frozen=True)
class EmergencyContact:
    name: Optional[str] = None
    relationship: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class DocumentRef:
    type: str
    url: str
    uploaded_at: datetime


@dataclass(frozen=True)
class Profile:
    """Employee profile, one per account (shared ``account_id``)."""

    profile_id: int
    account_id: int
    employee_id: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    job_details: Optional[JobDetails] = None
    salary_structure: Optional[SalaryStructure] = None
    emergency_contact: Optional[EmergencyContact] = None
    leave_balance: Optional[LeaveAllowance] = None
    documents: tuple[DocumentRef, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


def profile_to_dict(profile: Profile) -> dict:
    """API shape: nested job/salary/contact objects, allowance as a flat mapping."""

    data = to_json(profile)
    data["leave_balance"] = profile.leave_balance.to_dict() if profile.leave_balance else None
    return data
