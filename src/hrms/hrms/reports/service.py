from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from ..attendance.repository import AttendanceRepository
from ..auth.guards import require_elevated
from ..auth.model import Identity
from ..auth.repository import AccountRepository
from ..common.datetime_utils import month_bounds, now_local
from ..common.serializers import to_json
from ..core.constants import DEFAULT_ADMIN_LIMIT
from ..core.enums import AttendanceStatus, LeaveStatus, LeaveType
from ..core.exceptions import NotFoundError, ValidationError
from ..leaves.repository import LeaveRepository
from ..leaves.service import leave_to_dict
from ..payroll.repository import PayrollRepository
from ..profiles.model import profile_to_dict
from ..profiles.repository import ProfileRepository

ATTENDANCE_COLUMNS = (
    "attendance_id", "employee_id", "work_date", "check_in", "check_out", "total_minutes", "status", "notes",
)
LEAVE_COLUMNS = (
    "leave_id", "employee_id", "employee_name", "leave_type", "start_date", "end_date", "days", "status",
    "remarks", "admin_remarks", "salary_deduction", "deduction_reason",
)
PAYROLL_COLUMNS = (
    "payroll_id", "employee_id", "employee_name", "month", "year", "basic", "hra", "allowances", "deductions",
    "net_pay",
)
EMPLOYEE_COLUMNS = (
    "employee_id", "first_name", "last_name", "email", "role", "department", "job_title", "joining_date",
    "employment_type", "is_verified",
)


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    stats: dict
    columns: tuple[str, ...]


def attendance_stats(rows: list[dict]) -> dict:
    statuses = Counter(r["status"] for r in rows)
    minutes = sum(int(r.get("total_minutes") or 0) for r in rows)
    return {
        "total_days": len(rows),
        "present": statuses[AttendanceStatus.PRESENT.value],
        "absent": statuses[AttendanceStatus.ABSENT.value],
        "half_day": statuses[AttendanceStatus.HALF_DAY.value],
        "leave": statuses[AttendanceStatus.LEAVE.value],
        "total_hours": round(minutes / 60, 2),
    }


def leave_stats(rows: list[dict]) -> dict:
    statuses = Counter(r["status"] for r in rows)
    return {
        "total_requests": len(rows),
        "pending": statuses[LeaveStatus.PENDING.value],
        "approved": statuses[LeaveStatus.APPROVED.value],
        "rejected": statuses[LeaveStatus.REJECTED.value],
        "total_days": sum(int(r.get("days") or 0) for r in rows),
        "by_type": dict(Counter(r["leave_type"] for r in rows)),
    }


def payroll_stats(rows: list[dict]) -> dict:
    def total(key: str) -> float:
        return round(sum(float(r.get(key) or 0) for r in rows), 2)

    return {
        "total_records": len(rows),
        "total_basic": total("basic"),
        "total_hra": total("hra"),
        "total_allowances": total("allowances"),
        "total_deductions": total("deductions"),
        "total_net_pay": total("net_pay"),
    }


def employee_stats(rows: list[dict]) -> dict:
    return {
        "total_employees": len(rows),
        "by_department": dict(Counter(r.get("department") or "Unassigned" for r in rows)),
        "by_role": dict(Counter(r.get("role") or "unknown" for r in rows)),
        "verified": sum(1 for r in rows if r.get("is_verified")),
    }


class ReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        leaves: LeaveRepository,
        payroll: PayrollRepository,
        profiles: ProfileRepository,
        accounts: AccountRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._leaves = leaves
        self._payroll = payroll
        self._profiles = profiles
        self._accounts = accounts
        self._clock = clock

    def _names(self) -> dict[str, str]:
        return {p.employee_id: p.full_name for p in self._profiles.list_all()}

    def attendance_report(
        self,
        identity: Identity,
        *,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ReportData:
        require_elevated(identity)
        records = self._attendance.list_for_range(
            employee_id=employee_id, start_date=start_date, end_date=end_date, limit=DEFAULT_ADMIN_LIMIT
        )
        rows = [to_json(r) for r in records]
        return ReportData(rows=rows, stats=attendance_stats(rows), columns=ATTENDANCE_COLUMNS)

    def leave_report(
        self,
        identity: Identity,
        *,
        employee_id: Optional[str] = None,
        leave_type: Optional[LeaveType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ReportData:
        require_elevated(identity)
        names = self._names()
        rows = []
        leaves = self._leaves.list_all(
            employee_id=employee_id,
            leave_type=leave_type,
            starts_on_or_after=start_date,
            ends_on_or_before=end_date,
            limit=DEFAULT_ADMIN_LIMIT,
        )
        for leave in leaves:
            row = leave_to_dict(leave, employee_name=names.get(leave.employee_id, "Unknown"))
            row.pop("history", None)
            rows.append(row)
        return ReportData(rows=rows, stats=leave_stats(rows), columns=LEAVE_COLUMNS)

    def payroll_report(
        self,
        identity: Identity,
        *,
        employee_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> ReportData:
        require_elevated(identity)
        names = self._names()
        rows = []
        for record in self._payroll.search(employee_id=employee_id, month=month, year=year, limit=DEFAULT_ADMIN_LIMIT):
            row = to_json(record)
            row["employee_name"] = names.get(record.employee_id, "Unknown")
            rows.append(row)
        return ReportData(rows=rows, stats=payroll_stats(rows), columns=PAYROLL_COLUMNS)

    def employee_report(self, identity: Identity) -> ReportData:
        require_elevated(identity)
        profiles = self._profiles.list_all()
        accounts = {a.account_id: a for a in self._accounts.list_by_ids(p.account_id for p in profiles)}
        rows = []
        for profile in profiles:
            account = accounts.get(profile.account_id)
            job = profile.job_details
            rows.append(
                {
                    "employee_id": profile.employee_id,
                    "first_name": profile.first_name,
                    "last_name": profile.last_name,
                    "email": account.email if account else None,
                    "role": account.role.value if account else None,
                    "department": job.department if job else None,
                    "job_title": job.title if job else None,
                    "joining_date": job.joining_date.isoformat() if job and job.joining_date else None,
                    "employment_type": job.employment_type if job else None,
                    "is_verified": account.is_verified if account else False,
                }
            )
        return ReportData(rows=rows, stats=employee_stats(rows), columns=EMPLOYEE_COLUMNS)

    def employee_summary(self, identity: Identity, employee_id: Optional[str]) -> dict:
        """Current-month attendance and leave statistics for one employee."""

        require_elevated(identity)
        if not employee_id:
            raise ValidationError("Employee ID is required")
        profile = self._profiles.get_by_employee_id(employee_id)
        if not profile:
            raise NotFoundError("Employee not found")

        start, end = month_bounds(self._clock().date())
        attendance = [
            to_json(r)
            for r in self._attendance.list_for_range(
                employee_id=employee_id, start_date=start, end_date=end, limit=DEFAULT_ADMIN_LIMIT
            )
        ]
        leaves = [
            leave_to_dict(leave)
            for leave in self._leaves.list_all(
                employee_id=employee_id, starts_on_or_after=start, ends_on_or_before=end, limit=DEFAULT_ADMIN_LIMIT
            )
        ]
        leave_summary = leave_stats(leaves)

        return {
            "employee": profile_to_dict(profile),
            "attendance_stats": attendance_stats(attendance),
            "leave_stats": {
                k: leave_summary[k] for k in ("total_requests", "pending", "approved", "rejected")
            },
            "recent_attendance": attendance[:10],
            "recent_leaves": leaves[:5],
        }
