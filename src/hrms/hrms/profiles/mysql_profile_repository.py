from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import parse_iso_datetime
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, dump_json, fetchall, fetchone, load_json
from ..leaves.model import LeaveAllowance
from .model import DocumentRef, EmergencyContact, JobDetails, Profile, SalaryStructure
from .repository import ProfileRepository

_COLUMNS = """
    profile_id, account_id, employee_id, first_name, last_name, phone, address,
    job_title, department, joining_date, employment_type,
    basic, hra, allowances, deductions,
    emergency_name, emergency_relationship, emergency_phone,
    leave_balance, documents, created_at, updated_at
"""


def _to_profile(row: dict) -> Profile:
    job = None
    if row.get("job_title") is not None or row.get("department") is not None:
        job = JobDetails(
            title=row.get("job_title") or "",
            department=row.get("department") or "",
            joining_date=row.get("joining_date"),
            employment_type=row.get("employment_type") or "full-time",
        )

    salary = None
    if row.get("basic") is not None:
        salary = SalaryStructure(
            basic=as_float(row["basic"]),
            hra=as_float(row.get("hra")),
            allowances=as_float(row.get("allowances")),
            deductions=as_float(row.get("deductions")),
        )

    emergency = None
    if any(row.get(k) for k in ("emergency_name", "emergency_relationship", "emergency_phone")):
        emergency = EmergencyContact(
            name=row.get("emergency_name"),
            relationship=row.get("emergency_relationship"),
            phone=row.get("emergency_phone"),
        )

    balance_raw = load_json(row.get("leave_balance"))
    documents_raw = load_json(row.get("documents")) or []

    return Profile(
        profile_id=int(row["profile_id"]),
        account_id=int(row["account_id"]),
        employee_id=row["employee_id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        phone=row.get("phone"),
        address=row.get("address"),
        job_details=job,
        salary_structure=salary,
        emergency_contact=emergency,
        leave_balance=LeaveAllowance.from_dict(balance_raw) if balance_raw else None,
        documents=tuple(
            DocumentRef(type=d["type"], url=d["url"], uploaded_at=parse_iso_datetime(d["uploaded_at"]))
            for d in documents_raw
        ),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _field_params(
    *,
    phone: Optional[str],
    address: Optional[str],
    job_details: Optional[JobDetails],
    salary_structure: Optional[SalaryStructure],
    emergency_contact: Optional[EmergencyContact],
) -> tuple:
    job = job_details
    salary = salary_structure
    emergency = emergency_contact or EmergencyContact()
    return (
        phone,
        address,
        job.title if job else None,
        job.department if job else None,
        job.joining_date if job else None,
        job.employment_type if job else None,
        salary.basic if salary else None,
        salary.hra if salary else None,
        salary.allowances if salary else None,
        salary.deductions if salary else None,
        emergency.name,
        emergency.relationship,
        emergency.phone,
    )


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE {where} LIMIT 1", params)
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def get_by_account_id(self, account_id: int) -> Optional[Profile]:
        return self._get_one("account_id=%s", (account_id,))

    def get_by_employee_id(self, employee_id: str) -> Optional[Profile]:
        return self._get_one("employee_id=%s", (employee_id,))

    def list_all(self) -> Sequence[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles ORDER BY employee_id")
            return [_to_profile(r) for r in fetchall(cur)]

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
        params = (account_id, employee_id, first_name, last_name) + _field_params(
            phone=phone,
            address=address,
            job_details=job_details,
            salary_structure=salary_structure,
            emergency_contact=emergency_contact,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO profiles(
                    account_id, employee_id, first_name, last_name, phone, address,
                    job_title, department, joining_date, employment_type,
                    basic, hra, allowances, deductions,
                    emergency_name, emergency_relationship, emergency_phone
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                params,
            )
            return int(cur.lastrowid)

    def save(self, profile: Profile) -> bool:
        documents = [
            {"type": d.type, "url": d.url, "uploaded_at": d.uploaded_at.isoformat()}
            for d in profile.documents
        ]
        params = (
            (profile.first_name, profile.last_name)
            + _field_params(
                phone=profile.phone,
                address=profile.address,
                job_details=profile.job_details,
                salary_structure=profile.salary_structure,
                emergency_contact=profile.emergency_contact,
            )
            + (
                dump_json(profile.leave_balance.to_dict()) if profile.leave_balance else None,
                dump_json(documents),
                datetime.now(),
                profile.profile_id,
            )
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE profiles
                SET first_name=%s, last_name=%s, phone=%s, address=%s,
                    job_title=%s, department=%s, joining_date=%s, employment_type=%s,
                    basic=%s, hra=%s, allowances=%s, deductions=%s,
                    emergency_name=%s, emergency_relationship=%s, emergency_phone=%s,
                    leave_balance=%s, documents=%s, updated_at=%s
                WHERE profile_id=%s
                """,
                params,
            )
            return cur.rowcount > 0

    def set_leave_balance(self, profile_id: int, allowance: LeaveAllowance) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE profiles SET leave_balance=%s WHERE profile_id=%s",
                (dump_json(allowance.to_dict()), profile_id),
            )
            return cur.rowcount > 0
