from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def list_all(self) -> Sequence[Holiday]:
        """All blocked dates ordered by date."""

        raise NotImplementedError

    def list_range(self, *, start: date, end: date) -> Sequence[Holiday]:
        raise NotImplementedError

    def get_for_date(self, holiday_date: date) -> Optional[Holiday]:
        raise NotImplementedError

    def create_many(self, *, dates: Sequence[date], reason: str) -> int:
        """Insert one row per date; returns the number inserted."""

        raise NotImplementedError

    def delete_by_id(self, holiday_id: int) -> bool:
        raise NotImplementedError
