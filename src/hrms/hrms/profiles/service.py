from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..audit.model import AuditEntry
from ..audit.repository import AuditRepository
from ..auth.guards import require_elevated
from ..auth.model import Identity
from ..auth.repository import AccountRepository
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import NotFoundError, ValidationError
from .model import DocumentRef, EmergencyContact, JobDetails, Profile, SalaryStructure, profile_to_dict
from .repository import ProfileRepository

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "employee_profile"

_BASIC_FIELDS = ("first_name", "last_name", "phone", "address")
_JOB_FIELDS = ("title", "department", "joining_date", "employment_type")
_EMERGENCY_FIELDS = ("name", "relationship", "phone")

# Flat admin edit fields mapped onto (section, attribute).
_ADMIN_FIELD_MAP = {
    "first_name": (None, "first_name"),
    "last_name": (None, "last_name"),
    "phone": (None, "phone"),
    "address": (None, "address"),
    "job_title": ("job_details", "title"),
    "department": ("job_details", "department"),
    "basic_salary": ("salary_structure", "basic"),
    "hra": ("salary_structure", "hra"),
    "allowances": ("salary_structure", "allowances"),
    "deductions": ("salary_structure", "deductions"),
}


def _merge_job(current: Optional[JobDetails], values: Mapping[str, Any]) -> JobDetails:
    base = current or JobDetails(title="", department="")
    return replace(base, **{k: v for k, v in values.items() if k in _JOB_FIELDS})


def _merge_salary(current: Optional[SalaryStructure], values: Mapping[str, Any]) -> SalaryStructure:
    base = current or SalaryStructure(basic=0.0)
    return replace(base, **{k: float(v) for k, v in values.items()})


def _merge_emergency(current: Optional[EmergencyContact], values: Mapping[str, Any]) -> EmergencyContact:
    base = current or EmergencyContact()
    return replace(base, **{k: v for k, v in values.items() if k in _EMERGENCY_FIELDS})


class ProfileService:
    def __init__(
        self,
        profiles: ProfileRepository,
        accounts: AccountRepository,
        audit: AuditRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._profiles = profiles
        self._accounts = accounts
        self._audit = audit
        self._clock = clock

    def _own(self, identity: Identity) -> Profile:
        profile = self._profiles.get_by_account_id(identity.account_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def _employee(self, employee_id: str) -> Profile:
        profile = self._profiles.get_by_employee_id(employee_id)
        if not profile:
            raise NotFoundError("Employee not found")
        return profile

    def _with_account(self, profile: Profile) -> dict:
        account = self._accounts.get_by_id(profile.account_id)
        row = profile_to_dict(profile)
        row["email"] = account.email if account else None
        row["role"] = account.role.value if account else None
        row["is_verified"] = account.is_verified if account else None
        return row

    def create(
        self,
        identity: Identity,
        *,
        first_name: str,
        last_name: str,
        job_title: str,
        department: str,
        joining_date: date,
        basic_salary: float,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        emergency_contact: Optional[EmergencyContact] = None,
    ) -> Profile:
        if self._profiles.get_by_account_id(identity.account_id):
            raise ValidationError("Profile already exists")

        self._profiles.create(
            account_id=identity.account_id,
            employee_id=identity.employee_id,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            address=address,
            job_details=JobDetails(title=job_title, department=department, joining_date=joining_date),
            salary_structure=SalaryStructure(basic=float(basic_salary)),
            emergency_contact=emergency_contact,
        )
        logger.info("Profile created for %s", identity.employee_id)
        return self._own(identity)

    def get_mine(self, identity: Identity) -> Profile:
        return self._own(identity)

    def update_mine(
        self,
        identity: Identity,
        *,
        basic: Mapping[str, Any],
        job_details: Optional[Mapping[str, Any]] = None,
        emergency_contact: Optional[Mapping[str, Any]] = None,
    ) -> Profile:
        """Self-service edit; salary and leave allowance are not editable here."""

        profile = self._own(identity)
        updated = replace(profile, **{k: v for k, v in basic.items() if k in _BASIC_FIELDS})
        if job_details:
            updated = replace(updated, job_details=_merge_job(updated.job_details, job_details))
        if emergency_contact:
            updated = replace(updated, emergency_contact=_merge_emergency(updated.emergency_contact, emergency_contact))
        self._profiles.save(updated)
        return self._own(identity)

    def add_document(self, identity: Identity, *, doc_type: str, url: str) -> Profile:
        profile = self._own(identity)
        doc = DocumentRef(type=doc_type, url=url, uploaded_at=self._clock())
        self._profiles.save(replace(profile, documents=profile.documents + (doc,)))
        return self._own(identity)

    def list_employees(self, identity: Identity) -> list[dict]:
        require_elevated(identity)
        return [self._with_account(p) for p in self._profiles.list_all()]

    def get_employee(self, identity: Identity, employee_id: str) -> dict:
        require_elevated(identity)
        return self._with_account(self._employee(employee_id))

    def update_employee(self, identity: Identity, employee_id: str, changes: Mapping[str, Any]) -> Profile:
        """Apply flat admin edits and append an audit entry with both snapshots."""

        require_elevated(identity)
        before = self._employee(employee_id)

        sections: dict[Optional[str], dict[str, Any]] = {}
        for field_name, value in changes.items():
            if field_name not in _ADMIN_FIELD_MAP or value is None:
                continue
            section, attr = _ADMIN_FIELD_MAP[field_name]
            sections.setdefault(section, {})[attr] = value
        if not sections:
            raise ValidationError("No fields to update")

        after = replace(before, **sections.get(None, {}))
        if "job_details" in sections:
            after = replace(after, job_details=_merge_job(after.job_details, sections["job_details"]))
        if "salary_structure" in sections:
            after = replace(after, salary_structure=_merge_salary(after.salary_structure, sections["salary_structure"]))

        self._profiles.save(after)
        saved = self._employee(employee_id)
        self._audit.append(
            actor_id=identity.account_id,
            action="update_employee",
            entity=AUDIT_ENTITY,
            entity_id=employee_id,
            before=profile_to_dict(before),
            after=profile_to_dict(saved),
        )
        logger.info("Employee %s updated by account %s", employee_id, identity.account_id)
        return saved

    def audit_trail(self, identity: Identity, employee_id: str) -> Sequence[AuditEntry]:
        require_elevated(identity)
        self._employee(employee_id)
        return self._audit.list_for_entity(AUDIT_ENTITY, employee_id, limit=DEFAULT_HISTORY_LIMIT)
