from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from .model import PayComponents, PayrollRecord
from .repository import PayrollRepository

_COLUMNS = """
    payroll_id, account_id, employee_id, month, year, basic, hra, allowances, deductions, net_pay,
    updated_by, created_at, updated_at
"""


def _to_record(r: dict) -> PayrollRecord:
    return PayrollRecord(
        payroll_id=int(r["payroll_id"]),
        account_id=int(r["account_id"]),
        employee_id=r["employee_id"],
        month=int(r["month"]),
        year=int(r["year"]),
        basic=as_float(r["basic"]),
        hra=as_float(r.get("hra")),
        allowances=as_float(r.get("allowances")),
        deductions=as_float(r.get("deductions")),
        net_pay=as_float(r["net_pay"]),
        updated_by=r.get("updated_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, payroll_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll_records WHERE payroll_id=%s", (payroll_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_period(self, employee_id: str, month: int, year: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_records WHERE employee_id=%s AND month=%s AND year=%s",
                (employee_id, int(month), int(year)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(
        self,
        *,
        account_id: int,
        employee_id: str,
        month: int,
        year: int,
        pay: PayComponents,
        net_pay: float,
        updated_by: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll_records(
                    account_id, employee_id, month, year, basic, hra, allowances, deductions, net_pay, updated_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    account_id,
                    employee_id,
                    int(month),
                    int(year),
                    pay.basic,
                    pay.hra,
                    pay.allowances,
                    pay.deductions,
                    net_pay,
                    updated_by,
                ),
            )
            return int(cur.lastrowid)

    def update(self, payroll_id: int, *, pay: PayComponents, net_pay: float, updated_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payroll_records
                SET basic=%s, hra=%s, allowances=%s, deductions=%s, net_pay=%s, updated_by=%s, updated_at=%s
                WHERE payroll_id=%s
                """,
                (pay.basic, pay.hra, pay.allowances, pay.deductions, net_pay, updated_by, datetime.now(), payroll_id),
            )
            return cur.rowcount > 0

    def search(
        self,
        *,
        employee_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        limit: int,
    ) -> Sequence[PayrollRecord]:
        where = ["1=1"]
        params: list = []
        if employee_id:
            where.append("employee_id=%s")
            params.append(employee_id)
        if month is not None:
            where.append("month=%s")
            params.append(int(month))
        if year is not None:
            where.append("year=%s")
            params.append(int(year))
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payroll_records
                WHERE {' AND '.join(where)}
                ORDER BY year DESC, month DESC, employee_id
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
