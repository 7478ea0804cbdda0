"""Re-publish notifications whose real-time delivery failed.

Meant to run from cron. Set SOCKETIO_MESSAGE_QUEUE to the queue the socket
server listens on so the emits reach connected clients.
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from flask_socketio import SocketIO

from src.hrms.hrms.extensions import socketio
from src.hrms.hrms.main import create_app
from src.hrms.hrms.notifications.publisher import SocketIOPublisher
from src.hrms.hrms.notifications.service import NotificationService

logger = logging.getLogger("hrms.scripts.retry_notifications")


def main() -> None:
    app = create_app()
    container = app.extensions["hrms"]

    queue = os.getenv("SOCKETIO_MESSAGE_QUEUE")
    emitter = SocketIO(message_queue=queue) if queue else socketio
    service = NotificationService(container.notifications_repo, container.outbox_repo, SocketIOPublisher(emitter))

    with app.app_context():
        result = service.retry_pending()
    logger.info("Outbox retry: delivered=%(delivered)s failed=%(failed)s dropped=%(dropped)s", result)


if __name__ == "__main__":
    main()
