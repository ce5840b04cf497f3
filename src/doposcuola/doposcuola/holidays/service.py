from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Optional, Sequence

from ..common.datetime_utils import iter_days
from ..common.validators import require_non_empty
from ..core.enums import Capability
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import require
from ..users.model import User
from .model import Holiday
from .repository import HolidayRepository

logger = logging.getLogger(__name__)


class HolidayService:
    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def list_all(self) -> Sequence[Holiday]:
        return self._holidays.list_all()

    def reasons_between(self, start: date, end: date) -> Dict[date, str]:
        return {h.holiday_date: h.reason for h in self._holidays.list_range(start=start, end=end)}

    def holiday_on(self, day: date) -> Optional[Holiday]:
        return self._holidays.get_for_date(day)

    def is_holiday(self, day: date) -> bool:
        return self.holiday_on(day) is not None

    def create_range(self, *, actor: User, start: date, end: Optional[date] = None, reason: str) -> int:
        """Block every day from ``start`` to ``end`` inclusive; returns rows created."""

        require(actor, Capability.MANAGE_HOLIDAYS)
        reason = require_non_empty(reason, "Reason")

        end = end or start
        if end < start:
            raise ValidationError("End date cannot be before start date")

        days = list(iter_days(start, end))
        created = self._holidays.create_many(dates=days, reason=reason)
        logger.info("Holiday %s..%s (%s) added by %s", start, end, reason, actor.user_id)
        return created

    def delete(self, *, actor: User, holiday_id: int) -> None:
        require(actor, Capability.MANAGE_HOLIDAYS)
        if not self._holidays.delete_by_id(int(holiday_id)):
            raise NotFoundError("Holiday not found")
