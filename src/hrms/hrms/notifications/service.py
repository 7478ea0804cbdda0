from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..auth.model import Identity
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_DELIVERY_ATTEMPTS
from ..core.exceptions import NotFoundError
from .model import Notification
from .publisher import Publisher
from .repository import NotificationRepository, OutboxRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Stores notifications and pushes them to connected clients.

    Every stored notification has an outbox event. Delivery is attempted right
    away; a failed push stays in the outbox and is picked up by
    ``retry_pending`` instead of failing the caller's write.
    """

    def __init__(
        self,
        notifications: NotificationRepository,
        outbox: OutboxRepository,
        publisher: Publisher,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._notifications = notifications
        self._outbox = outbox
        self._publisher = publisher
        self._clock = clock

    def notify(
        self,
        account_id: int,
        *,
        type: str,
        title: str,
        message: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Notification:
        notification_id = self._notifications.create(
            account_id=account_id,
            type=type,
            title=title,
            message=message,
            metadata=dict(metadata or {}),
        )
        notification = self._notifications.get(notification_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        self._deliver(notification)
        return notification

    def _deliver(self, notification: Notification) -> bool:
        try:
            self._publisher.publish(notification.account_id, notification.to_dict())
        except Exception as exc:
            logger.warning(
                "Real-time delivery of notification %s failed: %s", notification.notification_id, exc
            )
            self._outbox.mark_failed(notification.notification_id, error=str(exc) or type(exc).__name__, at=self._clock())
            return False
        self._outbox.mark_delivered(notification.notification_id, at=self._clock())
        return True

    def retry_pending(self, *, limit: int = 100) -> dict:
        """Re-attempt undelivered outbox events; returns delivery counts."""

        delivered = failed = dropped = 0
        for event in self._outbox.list_undelivered(max_attempts=MAX_DELIVERY_ATTEMPTS, limit=limit):
            notification = self._notifications.get(event.notification_id)
            if notification is None:
                dropped += 1
                continue
            if self._deliver(notification):
                delivered += 1
            else:
                failed += 1
        return {"delivered": delivered, "failed": failed, "dropped": dropped}

    def list_for(self, identity: Identity) -> Sequence[Notification]:
        return self._notifications.list_for_account(identity.account_id, limit=DEFAULT_HISTORY_LIMIT)

    def _owned(self, identity: Identity, notification_id: int) -> Notification:
        notification = self._notifications.get(notification_id)
        if not notification or notification.account_id != identity.account_id:
            raise NotFoundError("Notification not found")
        return notification

    def mark_read(self, identity: Identity, notification_id: int) -> Notification:
        self._owned(identity, notification_id)
        self._notifications.mark_read(notification_id, identity.account_id, at=self._clock())
        return self._owned(identity, notification_id)

    def mark_all_read(self, identity: Identity) -> int:
        return self._notifications.mark_all_read(identity.account_id, at=self._clock())

    def delete(self, identity: Identity, notification_id: int) -> None:
        if not self._notifications.delete(notification_id, identity.account_id):
            raise NotFoundError("Notification not found")
