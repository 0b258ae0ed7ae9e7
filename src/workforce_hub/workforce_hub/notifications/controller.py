from __future__ import annotations

from flask import Flask, request

from ..common.http import current_user_id, login_required, ok
from ..container import Container


def _notification_json(n) -> dict:
    return {
        "notification_id": n.notification_id,
        "type": n.type.value,
        "payload": n.payload,
        "message": n.message,
        "is_read": n.is_read,
        "created_at": n.created_at.isoformat() if n.created_at else None,
        "read_at": n.read_at.isoformat() if n.read_at else None,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notifications", methods=["GET"], endpoint="notifications_list")
    @login_required
    def notifications_list():
        unread_only = request.args.get("unread", "").lower() in ("1", "true", "yes")
        items = container.notification_service.list_for_user(current_user_id(), unread_only=unread_only)
        return ok([_notification_json(n) for n in items])

    @app.route("/api/notifications/unread-count", methods=["GET"], endpoint="notifications_unread_count")
    @login_required
    def notifications_unread_count():
        return ok({"count": container.notification_service.unread_count(current_user_id())})

    @app.route("/api/notifications/<int:notification_id>/read", methods=["POST"], endpoint="notifications_read")
    @login_required
    def notifications_read(notification_id: int):
        container.notification_service.mark_read(notification_id, user_id=current_user_id())
        return ok(message="Notification marked as read")

    @app.route("/api/notifications/read-all", methods=["POST"], endpoint="notifications_read_all")
    @login_required
    def notifications_read_all():
        count = container.notification_service.mark_all_read(current_user_id())
        return ok({"updated": count}, message="All notifications marked as read")
