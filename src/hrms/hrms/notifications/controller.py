from __future__ import annotations

from flask import Flask

from ..common.responses import ok
from ..core.constants import API_PREFIX
from ..container import Container

PREFIX = f"{API_PREFIX}/notifications"


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    notifications = container.notification_service

    @app.route(PREFIX, methods=["GET"], endpoint="notifications_list")
    @guards.login_required
    def list_notifications(identity):
        return ok(notifications=[n.to_dict() for n in notifications.list_for(identity)])

    @app.route(f"{PREFIX}/<int:notification_id>/read", methods=["PUT"], endpoint="notifications_read")
    @guards.login_required
    def mark_read(identity, notification_id: int):
        notification = notifications.mark_read(identity, notification_id)
        return ok("Notification marked as read", notification=notification.to_dict())

    @app.route(f"{PREFIX}/mark-all-read", methods=["PUT"], endpoint="notifications_read_all")
    @guards.login_required
    def mark_all_read(identity):
        return ok("All notifications marked as read", updated=notifications.mark_all_read(identity))

    @app.route(f"{PREFIX}/<int:notification_id>", methods=["DELETE"], endpoint="notifications_delete")
    @guards.login_required
    def delete_notification(identity, notification_id: int):
        notifications.delete(identity, notification_id)
        return ok("Notification deleted")
