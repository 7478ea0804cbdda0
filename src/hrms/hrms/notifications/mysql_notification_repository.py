from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import DeliveryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Notification, OutboxEvent
from .repository import NotificationRepository, OutboxRepository

_COLUMNS = "notification_id, account_id, type, title, message, metadata, read_at, created_at"


def _to_notification(r: dict) -> Notification:
    return Notification(
        notification_id=int(r["notification_id"]),
        account_id=int(r["account_id"]),
        type=r["type"],
        title=r["title"],
        message=r["message"],
        metadata=load_json(r.get("metadata")) or {},
        read_at=r.get("read_at"),
        created_at=r.get("created_at"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        account_id: int,
        type: str,
        title: str,
        message: str,
        metadata: Mapping[str, Any],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(account_id, type, title, message, metadata)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (account_id, type, title, message, dump_json(dict(metadata))),
            )
            notification_id = int(cur.lastrowid)
            cur.execute(
                """
                INSERT INTO notification_outbox(notification_id, account_id, status, attempts)
                VALUES(%s,%s,%s,0)
                """,
                (notification_id, account_id, DeliveryStatus.PENDING.value),
            )
            return notification_id

    def get(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM notifications WHERE notification_id=%s", (notification_id,))
            r = fetchone(cur)
            return _to_notification(r) if r else None

    def list_for_account(self, account_id: int, *, limit: int) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM notifications
                WHERE account_id=%s
                ORDER BY created_at DESC, notification_id DESC
                LIMIT %s
                """,
                (account_id, int(limit)),
            )
            return [_to_notification(r) for r in fetchall(cur)]

    def mark_read(self, notification_id: int, account_id: int, *, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE notifications SET read_at=COALESCE(read_at, %s)
                WHERE notification_id=%s AND account_id=%s
                """,
                (at, notification_id, account_id),
            )
            return cur.rowcount > 0

    def mark_all_read(self, account_id: int, *, at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET read_at=%s WHERE account_id=%s AND read_at IS NULL",
                (at, account_id),
            )
            return int(cur.rowcount)

    def delete(self, notification_id: int, account_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM notifications WHERE notification_id=%s AND account_id=%s",
                (notification_id, account_id),
            )
            return cur.rowcount > 0


class MySQLOutboxRepository(OutboxRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_undelivered(self, *, max_attempts: int, limit: int) -> Sequence[OutboxEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT notification_id, account_id, status, attempts, last_error, updated_at
                FROM notification_outbox
                WHERE status IN (%s, %s) AND attempts < %s
                ORDER BY notification_id
                LIMIT %s
                """,
                (DeliveryStatus.PENDING.value, DeliveryStatus.FAILED.value, int(max_attempts), int(limit)),
            )
            return [
                OutboxEvent(
                    notification_id=int(r["notification_id"]),
                    account_id=int(r["account_id"]),
                    status=DeliveryStatus(r["status"]),
                    attempts=int(r.get("attempts") or 0),
                    last_error=r.get("last_error"),
                    updated_at=r.get("updated_at"),
                )
                for r in fetchall(cur)
            ]

    def mark_delivered(self, notification_id: int, *, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE notification_outbox
                SET status=%s, attempts=attempts+1, last_error=NULL, updated_at=%s
                WHERE notification_id=%s
                """,
                (DeliveryStatus.DELIVERED.value, at, notification_id),
            )
            return cur.rowcount > 0

    def mark_failed(self, notification_id: int, *, error: str, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE notification_outbox
                SET status=%s, attempts=attempts+1, last_error=%s, updated_at=%s
                WHERE notification_id=%s
                """,
                (DeliveryStatus.FAILED.value, error[:500], at, notification_id),
            )
            return cur.rowcount > 0
