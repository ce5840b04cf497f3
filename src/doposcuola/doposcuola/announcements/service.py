from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.enums import Capability
from ..core.exceptions import NotFoundError
from ..core.permissions import require
from ..users.model import User
from .model import Announcement
from .repository import AnnouncementRepository

logger = logging.getLogger(__name__)


class AnnouncementService:
    """Broadcast board: leaders publish, every signed-in user reads."""

    def __init__(self, announcements: AnnouncementRepository, *, clock: Callable[[], datetime] = now_local):
        self._announcements = announcements
        self._clock = clock

    def publish(self, *, actor: User, title: str, content: str) -> int:
        require(actor, Capability.ANNOUNCE)
        title = require_non_empty(title, "Title")
        content = require_non_empty(content, "Content")

        announcement_id = self._announcements.create(
            title=title,
            content=content,
            author_name=actor.name,
            created_at=self._clock(),
        )
        logger.info("Announcement %s published by %s", announcement_id, actor.user_id)
        return announcement_id

    def delete(self, *, actor: User, announcement_id: int) -> None:
        require(actor, Capability.ANNOUNCE)
        if not self._announcements.delete_by_id(int(announcement_id)):
            raise NotFoundError("Announcement not found")

    def list_recent(self, *, limit: Optional[int] = None) -> Sequence[Announcement]:
        return self._announcements.list_recent(limit=limit)

    def latest(self) -> Optional[Announcement]:
        items = self._announcements.list_recent(limit=1)
        return items[0] if items else None
