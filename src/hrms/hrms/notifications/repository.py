from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Notification, OutboxEvent


class NotificationRepository(Protocol):
    def create(
        self,
        *,
        account_id: int,
        type: str,
        title: str,
        message: str,
        metadata: Mapping[str, Any],
    ) -> int:
        """Insert the notification and its pending outbox event together."""

        raise NotImplementedError

    def get(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def list_for_account(self, account_id: int, *, limit: int) -> Sequence[Notification]:
        raise NotImplementedError

    def mark_read(self, notification_id: int, account_id: int, *, at: datetime) -> bool:
        raise NotImplementedError

    def mark_all_read(self, account_id: int, *, at: datetime) -> int:
        raise NotImplementedError

    def delete(self, notification_id: int, account_id: int) -> bool:
        raise NotImplementedError


class OutboxRepository(Protocol):
    def list_undelivered(self, *, max_attempts: int, limit: int) -> Sequence[OutboxEvent]:
        raise NotImplementedError

    def mark_delivered(self, notification_id: int, *, at: datetime) -> bool:
        raise NotImplementedError

    def mark_failed(self, notification_id: int, *, error: str, at: datetime) -> bool:
        raise NotImplementedError
