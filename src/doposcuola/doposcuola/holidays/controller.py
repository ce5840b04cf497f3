from __future__ import annotations

from flask import Flask

from ..common.web import current_user, date_arg, json_view, login_required, ok, request_data


def register(app: Flask, container) -> None:
    @app.route("/api/holidays", methods=["GET"], endpoint="list_holidays")
    @json_view
    @login_required
    def list_holidays():
        return ok({"holidays": [h.to_dict() for h in container.holiday_service.list_all()]})

    @app.route("/api/holidays", methods=["POST"], endpoint="create_holidays")
    @json_view
    @login_required
    def create_holidays():
        data = request_data()
        start = date_arg(data.get("start"))
        end = date_arg(data.get("end"), default=start)
        created = container.holiday_service.create_range(
            actor=current_user(), start=start, end=end, reason=data.get("reason", "")
        )
        return ok({"created": created}, 201)

    @app.route("/api/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="delete_holiday")
    @json_view
    @login_required
    def delete_holiday(holiday_id: int):
        container.holiday_service.delete(actor=current_user(), holiday_id=holiday_id)
        return ok()
