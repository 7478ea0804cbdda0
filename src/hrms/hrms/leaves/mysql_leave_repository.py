from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from .model import LeaveHistoryEntry, LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    leave_id, account_id, employee_id, leave_type, start_date, end_date, status, remarks,
    approver_id, approver_comment, admin_remarks, salary_deduction, deduction_reason,
    created_by, created_at, updated_at
"""


def _to_leave(r: dict, history: Iterable[LeaveHistoryEntry] = ()) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        account_id=int(r["account_id"]),
        employee_id=r["employee_id"],
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        status=LeaveStatus(r["status"]),
        remarks=r.get("remarks"),
        approver_id=r.get("approver_id"),
        approver_comment=r.get("approver_comment"),
        admin_remarks=r.get("admin_remarks"),
        salary_deduction=as_float(r.get("salary_deduction")),
        deduction_reason=r.get("deduction_reason"),
        created_by=r.get("created_by"),
        history=tuple(history),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _insert_history(cur, leave_id: int, entry: LeaveHistoryEntry) -> None:
    cur.execute(
        """
        INSERT INTO leave_history(leave_id, action, actor_id, comment, created_at)
        VALUES(%s,%s,%s,%s,%s)
        """,
        (leave_id, entry.action, entry.actor_id, entry.comment, entry.timestamp),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _with_history(self, cur, rows: list[dict]) -> list[LeaveRequest]:
        if not rows:
            return []
        ids = [int(r["leave_id"]) for r in rows]
        placeholders = ",".join(["%s"] * len(ids))
        cur.execute(
            f"""
            SELECT leave_id, action, actor_id, comment, created_at
            FROM leave_history
            WHERE leave_id IN ({placeholders})
            ORDER BY history_id
            """,
            tuple(ids),
        )
        grouped: dict[int, list[LeaveHistoryEntry]] = {i: [] for i in ids}
        for h in fetchall(cur):
            grouped[int(h["leave_id"])].append(
                LeaveHistoryEntry(
                    action=h["action"],
                    actor_id=int(h["actor_id"]),
                    comment=h.get("comment"),
                    timestamp=h["created_at"],
                )
            )
        return [_to_leave(r, grouped[int(r["leave_id"])]) for r in rows]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    account_id, employee_id, leave_type, start_date, end_date, status, remarks,
                    salary_deduction, deduction_reason, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    account_id,
                    employee_id,
                    leave_type.value,
                    start_date,
                    end_date,
                    LeaveStatus.PENDING.value,
                    remarks,
                    salary_deduction,
                    deduction_reason,
                    created_by,
                ),
            )
            leave_id = int(cur.lastrowid)
            _insert_history(cur, leave_id, applied)
            return leave_id

    def get(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE leave_id=%s", (leave_id,))
            row = fetchone(cur)
            if not row:
                return None
            return self._with_history(cur, [row])[0]

    def list_for_employee(self, employee_id: str, *, limit: int) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM leave_requests
                WHERE employee_id=%s
                ORDER BY created_at DESC, leave_id DESC
                LIMIT %s
                """,
                (employee_id, int(limit)),
            )
            return self._with_history(cur, fetchall(cur))

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
        clauses = []
        params: list = []
        if status:
            clauses.append("status=%s")
            params.append(status.value)
        if employee_id:
            clauses.append("employee_id=%s")
            params.append(employee_id)
        if leave_type:
            clauses.append("leave_type=%s")
            params.append(leave_type.value)
        if starts_on_or_after:
            clauses.append("DATE(start_date) >= %s")
            params.append(starts_on_or_after)
        if ends_on_or_before:
            clauses.append("DATE(end_date) <= %s")
            params.append(ends_on_or_before)
        params.append(int(limit))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM leave_requests
                {where}
                ORDER BY created_at DESC, leave_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return self._with_history(cur, fetchall(cur))

    def list_approved_in_year(self, employee_id: str, year: int) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM leave_requests
                WHERE employee_id=%s AND status=%s AND YEAR(start_date)=%s
                """,
                (employee_id, LeaveStatus.APPROVED.value, int(year)),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def record_decision(
        self,
        leave_id: int,
        *,
        expected: LeaveStatus,
        entry: LeaveHistoryEntry,
        status: LeaveStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approver_id=%s, approver_comment=%s, admin_remarks=%s, updated_at=%s
                WHERE leave_id=%s AND status=%s
                """,
                (status.value, entry.actor_id, entry.comment, entry.comment, entry.timestamp, leave_id, expected.value),
            )
            if cur.rowcount == 0:
                return False
            _insert_history(cur, leave_id, entry)
            return True
