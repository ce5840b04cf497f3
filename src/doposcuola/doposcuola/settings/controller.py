from __future__ import annotations

from flask import Flask

from ..common.web import current_user, json_view, login_required, ok, request_data
from ..core.exceptions import ValidationError


def register(app: Flask, container) -> None:
    @app.route("/api/settings/class-days", methods=["GET"], endpoint="get_class_days")
    @json_view
    @login_required
    def get_class_days():
        return ok({"class_days": list(container.settings_service.get_class_days())})

    @app.route("/api/settings/class-days", methods=["PUT"], endpoint="set_class_days")
    @json_view
    @login_required
    def set_class_days():
        days = request_data().get("class_days")
        if not isinstance(days, list):
            raise ValidationError("class_days must be a list of weekday numbers")
        saved = container.settings_service.set_class_days(actor=current_user(), days=days)
        return ok({"class_days": list(saved)})

    @app.route("/api/admin/access-code", methods=["GET"], endpoint="get_access_code")
    @json_view
    @login_required
    def get_access_code():
        return ok({"access_code": container.settings_service.get_access_code(actor=current_user())})

    @app.route("/api/admin/access-code", methods=["PUT"], endpoint="save_access_code")
    @json_view
    @login_required
    def save_access_code():
        container.settings_service.save_access_code(actor=current_user(), code=request_data().get("access_code", ""))
        return ok()
