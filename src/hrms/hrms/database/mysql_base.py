from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import DuplicateKeyError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except IntegrityError as exc:
        conn.rollback()
        if exc.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateKeyError() from exc
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def load_json(value: Any) -> Any:
    """Decode a MySQL JSON column; connectors return str, bytes or already-parsed values."""

    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value else None
    return value


def dump_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str)


def as_float(value: Any) -> float:
    return float(value) if value is not None else 0.0
