from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..core.enums import AttendanceMark


@dataclass(frozen=True)
class Booking:
    """A student's seat for one subject on one class day.

    ``teacher_id`` is set once a teacher claims the booking.
    """

    booking_id: int
    student_id: str
    student_name: str
    subject_id: str
    booking_date: date
    teacher_id: Optional[str] = None
    teacher_name: Optional[str] = None
    notes: Optional[str] = None
    attendance: AttendanceMark = AttendanceMark.PENDING
    created_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def is_claimed(self) -> bool:
        return bool(self.teacher_id)

    def to_dict(self) -> dict:
        return {
            "id": self.booking_id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "subject_id": self.subject_id,
            "date": self.booking_date.isoformat(),
            "teacher_id": self.teacher_id,
            "teacher_name": self.teacher_name,
            "notes": self.notes,
            "attendance": self.attendance.value,
        }


@dataclass(frozen=True)
class BookableDate:
    day: date
    holiday_reason: Optional[str] = None

    @property
    def is_blocked(self) -> bool:
        return self.holiday_reason is not None

    def to_dict(self) -> dict:
        return {"date": self.day.isoformat(), "blocked": self.is_blocked, "holiday_reason": self.holiday_reason}


@dataclass(frozen=True)
class TeacherBoard:
    """What a teacher sees for one day: open bookings and their own classes."""

    day: date
    unclaimed: List[Booking]
    mine: List[Booking]
