from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Announcement


class AnnouncementRepository(Protocol):
    def create(self, *, title: str, content: str, author_name: str, created_at: datetime) -> int:
        raise NotImplementedError

    def list_recent(self, *, limit: Optional[int] = None) -> Sequence[Announcement]:
        """Newest first."""

        raise NotImplementedError

    def delete_by_id(self, announcement_id: int) -> bool:
        raise NotImplementedError
