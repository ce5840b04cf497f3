from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Callable, List, Optional, Sequence

from ..common.datetime_utils import week_day
from ..core.constants import BOOKING_WINDOW_DAYS, MAX_BOOKINGS_PER_DAY
from ..core.enums import AttendanceMark, Capability
from ..core.exceptions import (
    AlreadyClaimedError,
    AuthorizationError,
    BookingLimitExceeded,
    DuplicateSubjectError,
    NotFoundError,
    ValidationError,
)
from ..core.permissions import require
from ..holidays.service import HolidayService
from ..settings.service import SystemSettingsService
from ..subjects.service import SubjectService
from ..users.model import User
from .model import BookableDate, Booking, TeacherBoard
from .repository import BookingRepository

logger = logging.getLogger(__name__)


class BookingService:
    """Student bookings and teacher claims.

    Every rule here is a read followed by a separate write. Two requests racing
    on the same student/date or the same booking can both pass their check.
    """

    def __init__(
        self,
        bookings: BookingRepository,
        subjects: SubjectService,
        holidays: HolidayService,
        settings: SystemSettingsService,
        *,
        today: Callable[[], date] = date.today,
    ):
        self._bookings = bookings
        self._subjects = subjects
        self._holidays = holidays
        self._settings = settings
        self._today = today

    # ---- student side ----

    def available_dates(self, today: Optional[date] = None) -> List[BookableDate]:
        """Class days in the booking window, starting tomorrow."""

        today = today or self._today()
        start = today + timedelta(days=1)
        end = today + timedelta(days=BOOKING_WINDOW_DAYS)
        class_days = set(self._settings.get_class_days())
        reasons = self._holidays.reasons_between(start, end)

        out: List[BookableDate] = []
        for offset in range(BOOKING_WINDOW_DAYS):
            day = start + timedelta(days=offset)
            if week_day(day) in class_days:
                out.append(BookableDate(day=day, holiday_reason=reasons.get(day)))
        return out

    def book(self, *, actor: User, subject_id: str, booking_date: date) -> Booking:
        require(actor, Capability.BOOK)

        subject = self._subjects.get((subject_id or "").strip())
        if subject is None or not subject.active:
            raise ValidationError("Subject not available")
        self._check_bookable_day(booking_date)

        existing = self._bookings.list_for_student_on_date(student_id=actor.user_id, booking_date=booking_date)
        if len(existing) >= MAX_BOOKINGS_PER_DAY:
            raise BookingLimitExceeded(f"You can book at most {MAX_BOOKINGS_PER_DAY} subjects per day")
        if any(b.subject_id == subject.subject_id for b in existing):
            raise DuplicateSubjectError("You already booked this subject for that day")

        booking_id = self._bookings.create(
            student_id=actor.user_id,
            student_name=actor.name,
            subject_id=subject.subject_id,
            booking_date=booking_date,
        )
        logger.info("Booking %s: %s booked %s on %s", booking_id, actor.user_id, subject.subject_id, booking_date)
        return self._get(booking_id)

    def _check_bookable_day(self, booking_date: date) -> None:
        if booking_date < self._today():
            raise ValidationError("Cannot book a date in the past")
        if week_day(booking_date) not in self._settings.get_class_days():
            raise ValidationError("Lessons are not held on that day")
        holiday = self._holidays.holiday_on(booking_date)
        if holiday is not None:
            raise ValidationError(f"Closed: {holiday.reason}")

    def my_bookings(self, *, actor: User, upcoming_only: bool = False) -> Sequence[Booking]:
        require(actor, Capability.BOOK)
        from_date = self._today() if upcoming_only else None
        return self._bookings.list_for_student(student_id=actor.user_id, from_date=from_date)

    def cancel(self, *, actor: User, booking_id: int) -> None:
        booking = self._get(booking_id)
        if booking.student_id != actor.user_id and not (actor.is_approved and actor.is_admin):
            raise AuthorizationError("You can only cancel your own bookings")
        self._bookings.delete_by_id(booking.booking_id)
        logger.info("Booking %s cancelled by %s", booking.booking_id, actor.user_id)

    # ---- teacher side ----

    def teacher_board(self, *, actor: User, day: date) -> TeacherBoard:
        require(actor, Capability.CLAIM)
        rows = self._bookings.list_for_date(day)
        return TeacherBoard(
            day=day,
            unclaimed=[b for b in rows if not b.is_claimed],
            mine=[b for b in rows if b.teacher_id == actor.user_id],
        )

    def claim(self, *, actor: User, booking_id: int) -> Booking:
        require(actor, Capability.CLAIM)
        booking = self._get(booking_id)
        if booking.is_claimed:
            raise AlreadyClaimedError("Already claimed")

        self._bookings.set_teacher(booking.booking_id, teacher_id=actor.user_id, teacher_name=actor.name)
        logger.info("Booking %s claimed by %s", booking.booking_id, actor.user_id)
        return self._get(booking.booking_id)

    def unclaim(self, *, actor: User, booking_id: int) -> Booking:
        booking = self._get(booking_id)
        if not booking.is_claimed:
            raise ValidationError("Booking is not claimed")
        if booking.teacher_id != actor.user_id and not (actor.is_approved and actor.is_admin):
            raise AuthorizationError("Only the claiming teacher can release this booking")

        self._bookings.set_teacher(booking.booking_id, teacher_id=None, teacher_name=None)
        logger.info("Booking %s released by %s", booking.booking_id, actor.user_id)
        return self._get(booking.booking_id)

    def update_notes(self, *, actor: User, booking_id: int, notes: Optional[str]) -> Booking:
        booking = self._own_claim(actor, booking_id)
        self._bookings.set_notes(booking.booking_id, (notes or "").strip() or None)
        return self._get(booking.booking_id)

    def mark_attendance(self, *, actor: User, booking_id: int, mark: str) -> Booking:
        try:
            attendance = AttendanceMark((mark or "").strip().upper())
        except ValueError:
            raise ValidationError("Attendance must be PRESENT or ABSENT")
        if attendance is AttendanceMark.PENDING:
            raise ValidationError("Attendance must be PRESENT or ABSENT")

        booking = self._own_claim(actor, booking_id)
        self._bookings.set_attendance(booking.booking_id, attendance)
        return self._get(booking.booking_id)

    def _own_claim(self, actor: User, booking_id: int) -> Booking:
        require(actor, Capability.CLAIM)
        booking = self._get(booking_id)
        if booking.teacher_id != actor.user_id:
            raise AuthorizationError("Only the claiming teacher can update this booking")
        return booking

    def _get(self, booking_id: int) -> Booking:
        booking = self._bookings.get_by_id(int(booking_id))
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking
