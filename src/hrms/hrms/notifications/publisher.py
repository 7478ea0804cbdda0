from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from flask_socketio import SocketIO

logger = logging.getLogger(__name__)

NOTIFICATION_EVENT = "notification"


def account_room(account_id: int) -> str:
    return f"account:{account_id}"


class Publisher(Protocol):
    def publish(self, account_id: int, payload: Mapping[str, Any]) -> None:
        raise NotImplementedError


class SocketIOPublisher(Publisher):
    """Pushes notification payloads to the account's private Socket.IO room."""

    def __init__(self, socketio: SocketIO):
        self._socketio = socketio

    def publish(self, account_id: int, payload: Mapping[str, Any]) -> None:
        self._socketio.emit(NOTIFICATION_EVENT, dict(payload), to=account_room(account_id))
        logger.debug("Emitted %s to %s", NOTIFICATION_EVENT, account_room(account_id))
