from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Announcement:
    announcement_id: int
    title: str
    content: str
    author_name: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.announcement_id,
            "title": self.title,
            "content": self.content,
            "author_name": self.author_name,
            "created_at": self.created_at.isoformat(timespec="seconds"),
        }
