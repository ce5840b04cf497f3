from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user, json_view, login_required, ok, request_data
from ..core.constants import FALLBACK_LANGUAGE


def register(app: Flask, container) -> None:
    @app.route("/api/subjects", methods=["GET"], endpoint="list_subjects")
    @json_view
    @login_required
    def list_subjects():
        lang = request.args.get("lang", FALLBACK_LANGUAGE)
        subjects = container.subject_service.list_active()
        return ok({"subjects": [dict(s.to_dict(), name=s.display_name(lang)) for s in subjects]})

    @app.route("/api/admin/subjects", methods=["GET"], endpoint="admin_subjects")
    @json_view
    @login_required
    def admin_subjects():
        subjects = container.subject_service.list_all(actor=current_user())
        return ok({"subjects": [s.to_dict() for s in subjects]})

    @app.route("/api/admin/subjects", methods=["POST"], endpoint="save_subject")
    @json_view
    @login_required
    def save_subject():
        data = request_data()
        subject = container.subject_service.save(
            actor=current_user(),
            subject_id=data.get("id", ""),
            translations=data.get("translations") or {},
            icon=data.get("icon", "📚"),
            color=data.get("color", "bg-gray-100 text-gray-800"),
            active=data.get("active", True),
        )
        return ok({"subject": subject.to_dict()})

    @app.route("/api/admin/subjects/<subject_id>", methods=["DELETE"], endpoint="delete_subject")
    @json_view
    @login_required
    def delete_subject(subject_id: str):
        container.subject_service.delete(actor=current_user(), subject_id=subject_id)
        return ok()
