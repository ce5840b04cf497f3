from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceMark
from .model import Booking


class BookingRepository(Protocol):
    """Booking rows. Every method is a single remote call; none of them lock."""

    def get_by_id(self, booking_id: int) -> Optional[Booking]:
        raise NotImplementedError

    def list_for_student_on_date(self, *, student_id: str, booking_date: date) -> Sequence[Booking]:
        raise NotImplementedError

    def list_for_student(self, *, student_id: str, from_date: Optional[date] = None) -> Sequence[Booking]:
        raise NotImplementedError

    def list_for_date(self, booking_date: date) -> Sequence[Booking]:
        raise NotImplementedError

    def list_range(self, *, start: date, end: date) -> Sequence[Booking]:
        raise NotImplementedError

    def create(self, *, student_id: str, student_name: str, subject_id: str, booking_date: date) -> int:
        """Insert an unclaimed booking with PENDING attendance; returns its id."""

        raise NotImplementedError

    def delete_by_id(self, booking_id: int) -> bool:
        raise NotImplementedError

    def set_teacher(self, booking_id: int, *, teacher_id: Optional[str], teacher_name: Optional[str]) -> bool:
        """Attach (or with None, detach) a teacher. Unconditional write."""

        raise NotImplementedError

    def set_notes(self, booking_id: int, notes: Optional[str]) -> bool:
        raise NotImplementedError

    def set_attendance(self, booking_id: int, attendance: AttendanceMark) -> bool:
        raise NotImplementedError
