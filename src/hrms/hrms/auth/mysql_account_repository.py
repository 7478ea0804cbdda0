from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Account
from .repository import AccountRepository

_COLUMNS = """
    account_id, employee_id, email, password_hash, role, is_verified,
    verification_token, reset_token, reset_token_expires, reset_otp, reset_otp_expires,
    refresh_token_hash, last_login, created_at
"""


def _to_account(row: dict) -> Account:
    return Account(
        account_id=int(row["account_id"]),
        employee_id=row["employee_id"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_verified=bool(row.get("is_verified")),
        verification_token=row.get("verification_token"),
        reset_token=row.get("reset_token"),
        reset_token_expires=row.get("reset_token_expires"),
        reset_otp=row.get("reset_otp"),
        reset_otp_expires=row.get("reset_otp_expires"),
        refresh_token_hash=row.get("refresh_token_hash"),
        last_login=row.get("last_login"),
        created_at=row.get("created_at"),
    )


class MySQLAccountRepository(AccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE {where} LIMIT 1", params)
            row = fetchone(cur)
            return _to_account(row) if row else None

    def _update(self, sql: str, params: tuple) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return cur.rowcount > 0

    def get_by_id(self, account_id: int) -> Optional[Account]:
        return self._get_one("account_id=%s", (account_id,))

    def get_by_email(self, email: str) -> Optional[Account]:
        return self._get_one("email=%s", (email.lower(),))

    def get_by_employee_id(self, employee_id: str) -> Optional[Account]:
        return self._get_one("employee_id=%s", (employee_id,))

    def find_by_email_or_employee_id(self, email: str, employee_id: str) -> Optional[Account]:
        return self._get_one("email=%s OR employee_id=%s", (email.lower(), employee_id))

    def get_by_verification_token(self, token: str) -> Optional[Account]:
        return self._get_one("verification_token=%s", (token,))

    def get_by_reset_token(self, token: str) -> Optional[Account]:
        return self._get_one("reset_token=%s", (token,))

    def create(
        self,
        *,
        employee_id: str,
        email: str,
        password_hash: str,
        role: Role,
        verification_token: Optional[str],
        is_verified: bool = False,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO accounts(employee_id, email, password_hash, role, is_verified, verification_token)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (employee_id, email.lower(), password_hash, role.value, int(is_verified), verification_token),
            )
            return int(cur.lastrowid)

    def mark_verified(self, account_id: int) -> bool:
        return self._update(
            "UPDATE accounts SET is_verified=1, verification_token=NULL WHERE account_id=%s",
            (account_id,),
        )

    def record_login(self, account_id: int, *, refresh_token_hash: str, at: datetime) -> bool:
        return self._update(
            "UPDATE accounts SET refresh_token_hash=%s, last_login=%s WHERE account_id=%s",
            (refresh_token_hash, at, account_id),
        )

    def clear_refresh_token(self, account_id: int) -> bool:
        return self._update(
            "UPDATE accounts SET refresh_token_hash=NULL WHERE account_id=%s",
            (account_id,),
        )

    def set_reset_token(self, account_id: int, *, token: str, expires: datetime) -> bool:
        return self._update(
            "UPDATE accounts SET reset_token=%s, reset_token_expires=%s WHERE account_id=%s",
            (token, expires, account_id),
        )

    def set_reset_otp(self, account_id: int, *, otp: str, expires: datetime) -> bool:
        return self._update(
            "UPDATE accounts SET reset_otp=%s, reset_otp_expires=%s WHERE account_id=%s",
            (otp, expires, account_id),
        )

    def update_password(self, account_id: int, *, password_hash: str) -> bool:
        return self._update(
            """
            UPDATE accounts
            SET password_hash=%s,
                reset_token=NULL, reset_token_expires=NULL,
                reset_otp=NULL, reset_otp_expires=NULL
            WHERE account_id=%s
            """,
            (password_hash, account_id),
        )

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM accounts")
            row = fetchone(cur)
            return int(row["total"]) if row else 0

    def list_by_ids(self, account_ids: Iterable[int]) -> Sequence[Account]:
        ids = [int(i) for i in account_ids]
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE account_id IN ({placeholders})", tuple(ids))
            return [_to_account(r) for r in fetchall(cur)]

    def list_by_roles(self, roles: Iterable[Role]) -> Sequence[Account]:
        values = [r.value for r in roles]
        if not values:
            return []
        placeholders = ",".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE role IN ({placeholders})", tuple(values))
            return [_to_account(r) for r in fetchall(cur)]
