from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceMark
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Booking
from .repository import BookingRepository

_SELECT = """
    SELECT id, student_id, student_name, subject_id, date, teacher_id, teacher_name,
           notes, attendance, created_at
    FROM bookings
"""


def _row_to_booking(row: dict) -> Booking:
    return Booking(
        booking_id=int(row["id"]),
        student_id=str(row["student_id"]),
        student_name=row["student_name"],
        subject_id=row["subject_id"],
        booking_date=normalize_mysql_date(row["date"]),
        teacher_id=row.get("teacher_id"),
        teacher_name=row.get("teacher_name"),
        notes=row.get("notes"),
        attendance=AttendanceMark(row.get("attendance") or AttendanceMark.PENDING.value),
        created_at=row.get("created_at"),
    )


class MySQLBookingRepository(BookingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str, params: tuple, order: str = "date ASC, id ASC") -> Sequence[Booking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {where} ORDER BY {order}", params)
            return [_row_to_booking(r) for r in fetchall(cur)]

    def get_by_id(self, booking_id: int) -> Optional[Booking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE id=%s", (int(booking_id),))
            row = fetchone(cur)
            return _row_to_booking(row) if row else None

    def list_for_student_on_date(self, *, student_id: str, booking_date: date) -> Sequence[Booking]:
        return self._select("student_id=%s AND date=%s", (student_id, booking_date))

    def list_for_student(self, *, student_id: str, from_date: Optional[date] = None) -> Sequence[Booking]:
        if from_date is None:
            return self._select("student_id=%s", (student_id,))
        return self._select("student_id=%s AND date >= %s", (student_id, from_date))

    def list_for_date(self, booking_date: date) -> Sequence[Booking]:
        return self._select("date=%s", (booking_date,), order="subject_id ASC, id ASC")

    def list_range(self, *, start: date, end: date) -> Sequence[Booking]:
        return self._select("date BETWEEN %s AND %s", (start, end))

    def create(self, *, student_id: str, student_name: str, subject_id: str, booking_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO bookings(student_id, student_name, subject_id, date, attendance)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (student_id, student_name, subject_id, booking_date, AttendanceMark.PENDING.value),
            )
            return int(cur.lastrowid)

    def delete_by_id(self, booking_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM bookings WHERE id=%s", (int(booking_id),))
            return cur.rowcount > 0

    def set_teacher(self, booking_id: int, *, teacher_id: Optional[str], teacher_name: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE bookings SET teacher_id=%s, teacher_name=%s WHERE id=%s",
                (teacher_id, teacher_name, int(booking_id)),
            )
            return cur.rowcount > 0

    def set_notes(self, booking_id: int, notes: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE bookings SET notes=%s WHERE id=%s", (notes, int(booking_id)))
            return cur.rowcount > 0

    def set_attendance(self, booking_id: int, attendance: AttendanceMark) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE bookings SET attendance=%s WHERE id=%s", (attendance.value, int(booking_id)))
            return cur.rowcount > 0
