from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Announcement
from .repository import AnnouncementRepository


class MySQLAnnouncementRepository(AnnouncementRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, title: str, content: str, author_name: str, created_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO announcements(title, content, author_name, created_at) VALUES(%s,%s,%s,%s)",
                (title, content, author_name, created_at),
            )
            return int(cur.lastrowid)

    def list_recent(self, *, limit: Optional[int] = None) -> Sequence[Announcement]:
        sql = "SELECT id, title, content, author_name, created_at FROM announcements ORDER BY created_at DESC, id DESC"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT %s"
            params = (int(limit),)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [
                Announcement(
                    announcement_id=int(r["id"]),
                    title=r["title"],
                    content=r["content"],
                    author_name=r["author_name"],
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]

    def delete_by_id(self, announcement_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM announcements WHERE id=%s", (int(announcement_id),))
            return cur.rowcount > 0
