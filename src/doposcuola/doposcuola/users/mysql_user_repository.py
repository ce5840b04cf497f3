from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role, UserStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import User
from .repository import UserRepository

_COLUMNS = """
    id, email, name, phone, role, age, dob, status, is_admin, is_leader,
    parent_name, parent_email, created_at
"""


def _row_to_user(row: dict) -> User:
    return User(
        user_id=str(row["id"]),
        name=row["name"],
        email=row["email"],
        role=Role(row["role"]),
        phone=row.get("phone") or "",
        age=int(row["age"]) if row.get("age") is not None else None,
        dob=normalize_mysql_date(row.get("dob")),
        status=UserStatus(row.get("status") or UserStatus.PENDING.value),
        is_admin=bool(row.get("is_admin")),
        is_leader=bool(row.get("is_leader")),
        parent_name=row.get("parent_name"),
        parent_email=row.get("parent_email"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE LOWER(email)=LOWER(%s)", (email.strip(),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def upsert_profile(self, user: User) -> User:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(id, email, name, phone, role, age, dob, status, parent_name, parent_email)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    email=VALUES(email), name=VALUES(name), phone=VALUES(phone), role=VALUES(role),
                    age=VALUES(age), dob=VALUES(dob), status=VALUES(status),
                    parent_name=VALUES(parent_name), parent_email=VALUES(parent_email)
                """,
                (
                    user.user_id,
                    user.email,
                    user.name,
                    user.phone,
                    user.role.value,
                    user.age,
                    user.dob,
                    user.status.value,
                    user.parent_name,
                    user.parent_email,
                ),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id=%s", (user.user_id,))
            return _row_to_user(fetchone(cur))

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY name ASC")
            return [_row_to_user(r) for r in fetchall(cur)]

    def list_pending(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE status=%s ORDER BY created_at DESC",
                (UserStatus.PENDING.value,),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def list_emails(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT email FROM users WHERE email IS NOT NULL AND email <> '' ORDER BY email")
            return [r["email"] for r in fetchall(cur)]

    def set_status(self, user_id: str, status: UserStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET status=%s WHERE id=%s", (status.value, user_id))
            return cur.rowcount > 0

    def set_leader(self, user_id: str, *, is_leader: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_leader=%s WHERE id=%s", (int(is_leader), user_id))
            return cur.rowcount > 0

    def delete_by_id(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE id=%s", (user_id,))
            return cur.rowcount > 0
