from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Holiday
from .repository import HolidayRepository


def _row_to_holiday(row: dict) -> Holiday:
    return Holiday(
        holiday_id=int(row["id"]),
        holiday_date=normalize_mysql_date(row["date"]),
        reason=row["reason"],
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, date, reason FROM holidays ORDER BY date ASC, id ASC")
            return [_row_to_holiday(r) for r in fetchall(cur)]

    def list_range(self, *, start: date, end: date) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, date, reason FROM holidays WHERE date BETWEEN %s AND %s ORDER BY date ASC",
                (start, end),
            )
            return [_row_to_holiday(r) for r in fetchall(cur)]

    def get_for_date(self, holiday_date: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, date, reason FROM holidays WHERE date=%s LIMIT 1", (holiday_date,))
            row = fetchone(cur)
            return _row_to_holiday(row) if row else None

    def create_many(self, *, dates: Sequence[date], reason: str) -> int:
        if not dates:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                "INSERT INTO holidays(date, reason) VALUES(%s,%s)",
                [(d, reason) for d in dates],
            )
            return len(dates)

    def delete_by_id(self, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE id=%s", (int(holiday_id),))
            return cur.rowcount > 0
