from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..bookings.repository import BookingRepository
from ..common.datetime_utils import parse_month
from ..core.constants import FALLBACK_LANGUAGE
from ..core.enums import AttendanceMark, Capability
from ..core.permissions import require
from ..subjects.service import SubjectService
from ..users.model import User

REPORT_FIELDS = [
    "date",
    "student_name",
    "subject_id",
    "subject_name",
    "teacher_name",
    "attendance",
    "notes",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class BookingReportService:
    def __init__(self, bookings: BookingRepository, subjects: SubjectService):
        self._bookings = bookings
        self._subjects = subjects

    def build_booking_report(
        self,
        *,
        actor: User,
        month: str,
        teacher_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        absences_only: bool = False,
        lang: str = FALLBACK_LANGUAGE,
    ) -> ReportData:
        """Bookings of one month (``YYYY-MM``) with a per-teacher tally.

        The summary only counts claimed bookings; unclaimed ones still show in rows.
        """

        require(actor, Capability.VIEW_REPORTS)

        year, mon = parse_month(month)
        start = date(year, mon, 1)
        end = date(year, mon, calendar.monthrange(year, mon)[1])

        names: dict[str, str] = {}
        summary_map: dict[str, dict] = {}
        out_rows: list[dict] = []

        for b in self._bookings.list_range(start=start, end=end):
            if teacher_id and b.teacher_id != teacher_id:
                continue
            if subject_id and b.subject_id != subject_id:
                continue
            if absences_only and b.attendance is not AttendanceMark.ABSENT:
                continue

            if b.subject_id not in names:
                subject = self._subjects.get(b.subject_id)
                names[b.subject_id] = subject.display_name(lang) if subject else b.subject_id

            out_rows.append(
                {
                    "date": b.booking_date.strftime("%Y-%m-%d"),
                    "student_name": b.student_name,
                    "subject_id": b.subject_id,
                    "subject_name": names[b.subject_id],
                    "teacher_name": b.teacher_name or "-",
                    "attendance": b.attendance.value,
                    "notes": b.notes or "",
                }
            )

            if not b.teacher_id:
                continue
            s = summary_map.get(b.teacher_id)
            if not s:
                s = {
                    "teacher_id": b.teacher_id,
                    "teacher_name": b.teacher_name or "-",
                    "held": 0,
                    "present": 0,
                    "absent": 0,
                }
                summary_map[b.teacher_id] = s
            s["held"] += 1
            if b.attendance is AttendanceMark.PRESENT:
                s["present"] += 1
            elif b.attendance is AttendanceMark.ABSENT:
                s["absent"] += 1

        summary = sorted(summary_map.values(), key=lambda x: (-x["held"], x["teacher_name"]))
        return ReportData(rows=out_rows, summary=summary)
