from __future__ import annotations

from flask import Flask, jsonify, request

from ..core.constants import API_PREFIX, DEFAULT_NOTIFICATION_LIMIT
from ..core.http import auth_required, current_actor, jsonable
from ..container import Container
from .model import Notification


def notification_to_dict(n: Notification) -> dict:
    return {
        "id": n.notification_id,
        "title": n.title,
        "message": n.message,
        "type": n.category.value,
        "is_read": n.is_read,
        "related_id": n.related_id,
        "created_at": jsonable(n.created_at),
    }


def register(app: Flask, container: Container) -> None:
    @app.route(f"{API_PREFIX}/notifications/", methods=["GET"], endpoint="notifications_list")
    @auth_required
    def notifications_list():
        limit = request.args.get("limit", DEFAULT_NOTIFICATION_LIMIT, type=int)
        items = container.notification_service.list_for_actor(current_actor(), limit=limit)
        return jsonify({"notifications": [notification_to_dict(n) for n in items]})

    @app.route(f"{API_PREFIX}/notifications/unread-count", methods=["GET"], endpoint="notifications_unread_count")
    @auth_required
    def notifications_unread_count():
        return jsonify({"unread_count": container.notification_service.unread_count(current_actor())})

    @app.route(
        f"{API_PREFIX}/notifications/<int:notification_id>/read",
        methods=["PUT"],
        endpoint="notifications_mark_read",
    )
    @auth_required
    def notifications_mark_read(notification_id: int):
        container.notification_service.mark_read(current_actor(), notification_id)
        return jsonify({"message": "Notification marked as read"})

    @app.route(f"{API_PREFIX}/notifications/read-all", methods=["PUT"], endpoint="notifications_mark_all_read")
    @auth_required
    def notifications_mark_all_read():
        updated = container.notification_service.mark_all_read(current_actor())
        return jsonify({"message": "All notifications marked as read", "updated": updated})
