from __future__ import annotations

import hmac
import logging
from typing import Iterable, Optional, Tuple

from ..core.constants import DEFAULT_CLASS_DAYS, SETTING_ACCESS_CODE, SETTING_CLASS_DAYS
from ..core.enums import Capability
from ..core.exceptions import ValidationError
from ..core.permissions import require
from ..users.model import User
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


class SystemSettingsService:
    """Class-day configuration (leaders) and the school access code (admins)."""

    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def get_class_days(self) -> Tuple[int, ...]:
        raw = self._settings.get(SETTING_CLASS_DAYS)
        if raw is None:
            return DEFAULT_CLASS_DAYS
        try:
            return tuple(sorted({int(part) for part in raw.split(",") if part.strip()}))
        except ValueError:
            logger.warning("Ignoring malformed class_days setting %r", raw)
            return DEFAULT_CLASS_DAYS

    def set_class_days(self, *, actor: User, days: Iterable[int]) -> Tuple[int, ...]:
        require(actor, Capability.CONFIGURE_CLASS_DAYS)

        try:
            normalized = tuple(sorted({int(d) for d in days}))
        except (TypeError, ValueError):
            raise ValidationError("Class days must be weekday numbers (0=Sunday .. 6=Saturday)")
        if any(d < 0 or d > 6 for d in normalized):
            raise ValidationError("Class days must be weekday numbers (0=Sunday .. 6=Saturday)")

        self._settings.set(SETTING_CLASS_DAYS, ",".join(str(d) for d in normalized))
        logger.info("Class days set to %s by %s", normalized, actor.user_id)
        return normalized

    def get_access_code(self, *, actor: User) -> str:
        require(actor, Capability.MANAGE_ACCESS_CODE)
        return self._settings.get(SETTING_ACCESS_CODE) or ""

    def save_access_code(self, *, actor: User, code: str) -> None:
        require(actor, Capability.MANAGE_ACCESS_CODE)
        self._settings.set(SETTING_ACCESS_CODE, (code or "").strip())

    def check_access_code(self, code: Optional[str]) -> bool:
        """An empty configured code means registration is open."""

        expected = (self._settings.get(SETTING_ACCESS_CODE) or "").strip()
        if not expected:
            return True
        return hmac.compare_digest(expected.encode("utf-8"), (code or "").strip().encode("utf-8"))
