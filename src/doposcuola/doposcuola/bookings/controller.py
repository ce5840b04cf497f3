from __future__ import annotations

from flask import Flask, request

from ..common.web import capability_required, current_user, date_arg, json_view, login_required, ok, request_data
from ..core.enums import Capability


def register(app: Flask, container) -> None:
    @app.route("/api/dates", methods=["GET"], endpoint="available_dates")
    @json_view
    @login_required
    def available_dates():
        dates = container.booking_service.available_dates()
        return ok({"dates": [d.to_dict() for d in dates]})

    # ---- student ----

    @app.route("/api/bookings/mine", methods=["GET"], endpoint="my_bookings")
    @json_view
    @capability_required(Capability.BOOK)
    def my_bookings():
        upcoming = request.args.get("upcoming", "0") == "1"
        bookings = container.booking_service.my_bookings(actor=current_user(), upcoming_only=upcoming)
        return ok({"bookings": [b.to_dict() for b in bookings]})

    @app.route("/api/bookings", methods=["POST"], endpoint="create_booking")
    @json_view
    @login_required
    def create_booking():
        data = request_data()
        booking = container.booking_service.book(
            actor=current_user(),
            subject_id=data.get("subject_id", ""),
            booking_date=date_arg(data.get("date")),
        )
        return ok({"booking": booking.to_dict()}, 201)

    @app.route("/api/bookings/<int:booking_id>", methods=["DELETE"], endpoint="cancel_booking")
    @json_view
    @login_required
    def cancel_booking(booking_id: int):
        container.booking_service.cancel(actor=current_user(), booking_id=booking_id)
        return ok()

    # ---- teacher ----

    @app.route("/api/teacher/board", methods=["GET"], endpoint="teacher_board")
    @json_view
    @capability_required(Capability.CLAIM)
    def teacher_board():
        day = date_arg(request.args.get("date"))
        board = container.booking_service.teacher_board(actor=current_user(), day=day)
        return ok(
            {
                "date": board.day.isoformat(),
                "unclaimed": [b.to_dict() for b in board.unclaimed],
                "mine": [b.to_dict() for b in board.mine],
            }
        )

    @app.route("/api/bookings/<int:booking_id>/claim", methods=["POST"], endpoint="claim_booking")
    @json_view
    @login_required
    def claim_booking(booking_id: int):
        booking = container.booking_service.claim(actor=current_user(), booking_id=booking_id)
        return ok({"booking": booking.to_dict()})

    @app.route("/api/bookings/<int:booking_id>/unclaim", methods=["POST"], endpoint="unclaim_booking")
    @json_view
    @login_required
    def unclaim_booking(booking_id: int):
        booking = container.booking_service.unclaim(actor=current_user(), booking_id=booking_id)
        return ok({"booking": booking.to_dict()})

    @app.route("/api/bookings/<int:booking_id>/notes", methods=["PUT"], endpoint="update_booking_notes")
    @json_view
    @login_required
    def update_booking_notes(booking_id: int):
        data = request_data()
        booking = container.booking_service.update_notes(
            actor=current_user(), booking_id=booking_id, notes=data.get("notes")
        )
        return ok({"booking": booking.to_dict()})

    @app.route("/api/bookings/<int:booking_id>/attendance", methods=["PUT"], endpoint="mark_attendance")
    @json_view
    @login_required
    def mark_attendance(booking_id: int):
        data = request_data()
        booking = container.booking_service.mark_attendance(
            actor=current_user(), booking_id=booking_id, mark=data.get("attendance", "")
        )
        return ok({"booking": booking.to_dict()})
