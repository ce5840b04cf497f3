from __future__ import annotations

from flask import Flask

from ..common.web import current_user, json_view, login_required, ok


def register(app: Flask, container) -> None:
    @app.route("/api/admin/users", methods=["GET"], endpoint="admin_users")
    @json_view
    @login_required
    def admin_users():
        users = container.user_service.list_all(actor=current_user())
        return ok({"users": [u.to_dict() for u in users]})

    @app.route("/api/admin/users/pending", methods=["GET"], endpoint="pending_users")
    @json_view
    @login_required
    def pending_users():
        users = container.user_service.list_pending(actor=current_user())
        return ok({"users": [u.to_dict() for u in users]})

    @app.route("/api/admin/users/<user_id>/approve", methods=["POST"], endpoint="approve_user")
    @json_view
    @login_required
    def approve_user(user_id: str):
        container.user_service.approve(actor=current_user(), user_id=user_id)
        return ok()

    @app.route("/api/admin/users/<user_id>/reject", methods=["POST"], endpoint="reject_user")
    @json_view
    @login_required
    def reject_user(user_id: str):
        container.user_service.reject(actor=current_user(), user_id=user_id)
        return ok()

    @app.route("/api/admin/users/<user_id>", methods=["DELETE"], endpoint="delete_user")
    @json_view
    @login_required
    def delete_user(user_id: str):
        container.user_service.delete_user(actor=current_user(), user_id=user_id)
        return ok()

    @app.route("/api/admin/users/<user_id>/leader", methods=["POST"], endpoint="toggle_leader")
    @json_view
    @login_required
    def toggle_leader(user_id: str):
        is_leader = container.user_service.toggle_leader(actor=current_user(), user_id=user_id)
        return ok({"is_leader": is_leader})

    @app.route("/api/leader/emails", methods=["GET"], endpoint="list_emails")
    @json_view
    @login_required
    def list_emails():
        return ok({"emails": list(container.user_service.list_emails(actor=current_user()))})
