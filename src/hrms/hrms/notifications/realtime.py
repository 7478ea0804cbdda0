"""Socket.IO handlers: clients join their private room with an access token."""
from __future__ import annotations

import logging

from flask_socketio import SocketIO, join_room

from ..auth.middleware import Authenticator
from ..core.exceptions import AuthenticationError
from .publisher import account_room

logger = logging.getLogger(__name__)


def register_socket_handlers(socketio: SocketIO, authenticator: Authenticator) -> None:
    @socketio.on("join")
    def on_join(data):
        token = data.get("token") if isinstance(data, dict) else None
        try:
            identity = authenticator.identify_token(token)
        except AuthenticationError as exc:
            logger.info("Socket join rejected: %s", exc)
            return {"success": False, "message": str(exc)}

        room = account_room(identity.account_id)
        join_room(room)
        logger.debug("Socket joined %s", room)
        return {"success": True, "room": room}
