from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.constants import PASSWORD_HASH_METHOD


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


@dataclass(frozen=True)
class DemoUser:
    employee_id: str
    email: str
    password: str
    role: str
    first_name: str
    last_name: str
    department: str
    job_title: str
    basic: float


DEMO_USERS = (
    DemoUser("ADMIN001", "admin@hrms.local", "Admin@123", "admin", "System", "Admin", "Management", "Administrator", 90000),
    DemoUser("HR001", "hr@hrms.local", "Hr@12345", "hr", "Helen", "Reyes", "Human Resources", "HR Manager", 60000),
    DemoUser("EMP0001", "employee@hrms.local", "Employee@123", "employee", "Evan", "Cole", "Engineering", "Developer", 45000),
)


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "hrms_db")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = {
        "host": target.host,
        "port": target.port,
        "user": target.user,
        "password": target.password,
        "use_pure": True,
    }
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_file(target: DBTarget, path: str | Path) -> None:
    sql = _strip_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _exec_file(_as_target(db_config), schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _exec_file(_as_target(db_config), seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert the demo admin, HR and employee accounts with their profiles."""

    target = _as_target(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)
        for user in DEMO_USERS:
            password_hash = generate_password_hash(user.password, method=PASSWORD_HASH_METHOD)
            cur.execute("SELECT account_id FROM accounts WHERE email=%s", (user.email,))
            existing = cur.fetchone()
            if existing:
                account_id = int(existing["account_id"])
                cur.execute(
                    "UPDATE accounts SET password_hash=%s, role=%s, is_verified=1 WHERE account_id=%s",
                    (password_hash, user.role, account_id),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO accounts (employee_id, email, password_hash, role, is_verified)
                    VALUES (%s, %s, %s, %s, 1)
                    """,
                    (user.employee_id, user.email, password_hash, user.role),
                )
                account_id = int(cur.lastrowid)

            cur.execute("SELECT profile_id FROM profiles WHERE account_id=%s", (account_id,))
            if not cur.fetchone():
                cur.execute(
                    """
                    INSERT INTO profiles (
                        account_id, employee_id, first_name, last_name,
                        job_title, department, joining_date, employment_type, basic
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, 'full-time', %s)
                    """,
                    (
                        account_id,
                        user.employee_id,
                        user.first_name,
                        user.last_name,
                        user.job_title,
                        user.department,
                        date.today(),
                        user.basic,
                    ),
                )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
