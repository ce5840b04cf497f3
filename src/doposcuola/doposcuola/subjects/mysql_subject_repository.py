from __future__ import annotations

import json
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json_column
from .model import SubjectDef
from .repository import SubjectRepository


def _row_to_subject(row: dict) -> SubjectDef:
    return SubjectDef(
        subject_id=row["id"],
        translations=load_json_column(row.get("translations"), {}),
        icon=row.get("icon") or "",
        color=row.get("color") or "",
        active=bool(row.get("active", True)),
    )


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, subject_id: str) -> Optional[SubjectDef]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, translations, icon, color, active FROM subjects WHERE id=%s", (subject_id,))
            row = fetchone(cur)
            return _row_to_subject(row) if row else None

    def list_all(self, *, active_only: bool = False) -> Sequence[SubjectDef]:
        where = "WHERE active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, translations, icon, color, active FROM subjects {where} ORDER BY id")
            return [_row_to_subject(r) for r in fetchall(cur)]

    def upsert(self, subject: SubjectDef) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO subjects(id, translations, icon, color, active)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    translations=VALUES(translations), icon=VALUES(icon),
                    color=VALUES(color), active=VALUES(active)
                """,
                (
                    subject.subject_id,
                    json.dumps(subject.translations, ensure_ascii=False),
                    subject.icon,
                    subject.color,
                    int(subject.active),
                ),
            )

    def delete_by_id(self, subject_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM subjects WHERE id=%s", (subject_id,))
            return cur.rowcount > 0
