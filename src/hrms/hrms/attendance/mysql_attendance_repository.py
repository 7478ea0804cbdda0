from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, account_id, employee_id, work_date, check_in, check_out, total_minutes,
    status, notes, created_by, updated_by, created_at, updated_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        account_id=int(r["account_id"]),
        employee_id=r["employee_id"],
        work_date=r["work_date"],
        check_in=r.get("check_in"),
        check_out=r.get("check_out"),
        total_minutes=int(r.get("total_minutes") or 0),
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _update(self, sql: str, params: tuple) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return cur.rowcount > 0

    def get(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (attendance_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(account_id, employee_id, work_date, check_in, status, created_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (account_id, employee_id, work_date, check_in, status.value, created_by),
            )
            return int(cur.lastrowid)

    def set_checkin(self, attendance_id: int, *, check_in: datetime, status: AttendanceStatus, updated_by: int) -> bool:
        return self._update(
            """
            UPDATE attendance_records
            SET check_in=%s, status=%s, updated_by=%s
            WHERE attendance_id=%s AND check_in IS NULL
            """,
            (check_in, status.value, updated_by, attendance_id),
        )

    def set_checkout(self, attendance_id: int, *, check_out: datetime, total_minutes: int, updated_by: int) -> bool:
        return self._update(
            """
            UPDATE attendance_records
            SET check_out=%s, total_minutes=%s, updated_by=%s
            WHERE attendance_id=%s AND check_out IS NULL
            """,
            (check_out, int(total_minutes), updated_by, attendance_id),
        )

    def admin_update(
        self,
        attendance_id: int,
        *,
        status: Optional[AttendanceStatus],
        notes: Optional[str],
        updated_by: int,
    ) -> bool:
        return self._update(
            """
            UPDATE attendance_records
            SET status=COALESCE(%s, status), notes=COALESCE(%s, notes), updated_by=%s
            WHERE attendance_id=%s
            """,
            (status.value if status else None, notes, updated_by, attendance_id),
        )

    def list_for_range(
        self,
        *,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int,
    ) -> Sequence[AttendanceRecord]:
        where = ["1=1"]
        params: list = []
        if employee_id:
            where.append("employee_id=%s")
            params.append(employee_id)
        if start_date:
            where.append("work_date>=%s")
            params.append(start_date)
        if end_date:
            where.append("work_date<=%s")
            params.append(end_date)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {' AND '.join(where)}
                ORDER BY work_date DESC, attendance_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
