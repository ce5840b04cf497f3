from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user, json_view, login_required, ok, request_data


def register(app: Flask, container) -> None:
    @app.route("/api/announcements", methods=["GET"], endpoint="list_announcements")
    @json_view
    @login_required
    def list_announcements():
        limit = request.args.get("limit", type=int)
        items = container.announcement_service.list_recent(limit=limit)
        return ok({"announcements": [a.to_dict() for a in items]})

    @app.route("/api/announcements/latest", methods=["GET"], endpoint="latest_announcement")
    @json_view
    @login_required
    def latest_announcement():
        latest = container.announcement_service.latest()
        return ok({"announcement": latest.to_dict() if latest else None})

    @app.route("/api/announcements", methods=["POST"], endpoint="publish_announcement")
    @json_view
    @login_required
    def publish_announcement():
        data = request_data()
        announcement_id = container.announcement_service.publish(
            actor=current_user(), title=data.get("title", ""), content=data.get("content", "")
        )
        return ok({"id": announcement_id}, 201)

    @app.route("/api/announcements/<int:announcement_id>", methods=["DELETE"], endpoint="delete_announcement")
    @json_view
    @login_required
    def delete_announcement(announcement_id: int):
        container.announcement_service.delete(actor=current_user(), announcement_id=announcement_id)
        return ok()
