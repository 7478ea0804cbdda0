from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import EmergencyContact, JobDetails, Profile, SalaryStructure
from ..leaves.model import LeaveAllowance


class ProfileRepository(Protocol):
    def get_by_account_id(self, account_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_employee_id(self, employee_id: str) -> Optional[Profile]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Profile]:
        raise NotImplementedError

    def create(
        self,
        *,
        account_id: int,
        employee_id: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        job_details: Optional[JobDetails] = None,
        salary_structure: Optional[SalaryStructure] = None,
        emergency_contact: Optional[EmergencyContact] = None,
    ) -> int:
        raise NotImplementedError

    def save(self, profile: Profile) -> bool:
        """Persist every mutable field of ``profile`` (matched by profile_id)."""

        raise NotImplementedError

    def set_leave_balance(self, profile_id: int, allowance: LeaveAllowance) -> bool:
        raise NotImplementedError
