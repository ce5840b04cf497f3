from __future__ import annotations

import json
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import TokenPurpose
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, load_json_column
from .model import AuthIdentity, AuthSession, PendingRegistration
from .repository import AuthStore, PendingRegistrationRepository


class MySQLAuthStore(AuthStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _row_to_identity(row: dict) -> AuthIdentity:
        return AuthIdentity(identity_id=str(row["id"]), email=row["email"], password_hash=row.get("password_hash"))

    def get_identity_by_email(self, email: str) -> Optional[AuthIdentity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, email, password_hash FROM auth_identities WHERE LOWER(email)=LOWER(%s)",
                (email.strip(),),
            )
            row = fetchone(cur)
            return self._row_to_identity(row) if row else None

    def get_identity(self, identity_id: str) -> Optional[AuthIdentity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, email, password_hash FROM auth_identities WHERE id=%s", (identity_id,))
            row = fetchone(cur)
            return self._row_to_identity(row) if row else None

    def create_identity(self, *, identity_id: str, email: str) -> AuthIdentity:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO auth_identities(id, email) VALUES(%s,%s)", (identity_id, email))
        return AuthIdentity(identity_id=identity_id, email=email)

    def set_password_hash(self, identity_id: str, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE auth_identities SET password_hash=%s WHERE id=%s", (password_hash, identity_id))
            return cur.rowcount > 0

    def touch_sign_in(self, identity_id: str, *, at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE auth_identities SET last_sign_in_at=%s WHERE id=%s", (at, identity_id))

    def add_token(self, *, identity_id: str, purpose: TokenPurpose, token_hash: str, expires_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO auth_tokens(identity_id, purpose, token_hash, expires_at)
                VALUES(%s,%s,%s,%s)
                """,
                (identity_id, purpose.value, token_hash, expires_at),
            )

    def invalidate_tokens(self, *, identity_id: str, purposes: Sequence[TokenPurpose], at: datetime) -> None:
        if not purposes:
            return
        placeholders = ",".join(["%s"] * len(purposes))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE auth_tokens SET consumed_at=%s
                WHERE identity_id=%s AND consumed_at IS NULL AND purpose IN ({placeholders})
                """,
                (at, identity_id, *[p.value for p in purposes]),
            )

    def consume_token(
        self,
        *,
        purpose: TokenPurpose,
        token_hash: str,
        now: datetime,
        identity_id: Optional[str] = None,
    ) -> Optional[str]:
        clauses = ["purpose=%s", "token_hash=%s", "consumed_at IS NULL", "expires_at > %s"]
        params: list[object] = [purpose.value, token_hash, now]
        if identity_id is not None:
            clauses.append("identity_id=%s")
            params.append(identity_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT token_id, identity_id FROM auth_tokens WHERE {' AND '.join(clauses)} LIMIT 1",
                tuple(params),
            )
            row = fetchone(cur)
            if not row:
                return None
            # Guarded update so a token raced by another request is only used once.
            cur.execute(
                "UPDATE auth_tokens SET consumed_at=%s WHERE token_id=%s AND consumed_at IS NULL",
                (now, int(row["token_id"])),
            )
            if cur.rowcount == 0:
                return None
            return str(row["identity_id"])

    def record_failed_attempt(self, *, identity_id: str, purpose: TokenPurpose, now: datetime) -> int:
        live = "identity_id=%s AND purpose=%s AND consumed_at IS NULL AND expires_at > %s"
        params = (identity_id, purpose.value, now)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE auth_tokens SET attempts = attempts + 1 WHERE {live}", params)
            cur.execute(f"SELECT COALESCE(MAX(attempts), 0) AS attempts FROM auth_tokens WHERE {live}", params)
            row = fetchone(cur)
            return int(row["attempts"]) if row else 0

    def create_session(
        self, *, identity_id: str, token_hash: str, is_recovery: bool, created_at: datetime
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO auth_sessions(identity_id, token_hash, is_recovery, created_at) VALUES(%s,%s,%s,%s)",
                (identity_id, token_hash, int(is_recovery), created_at),
            )

    def get_session(self, token_hash: str, *, created_after: datetime) -> Optional[AuthSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.identity_id, s.is_recovery, i.email
                FROM auth_sessions s
                JOIN auth_identities i ON i.id = s.identity_id
                WHERE s.token_hash=%s AND s.revoked_at IS NULL AND s.created_at > %s
                """,
                (token_hash, created_after),
            )
            row = fetchone(cur)
            if not row:
                return None
            return AuthSession(
                access_token="",
                user_id=str(row["identity_id"]),
                email=row["email"],
                is_recovery=bool(row["is_recovery"]),
            )

    def revoke_session(self, token_hash: str, *, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE auth_sessions SET revoked_at=%s WHERE token_hash=%s AND revoked_at IS NULL",
                (at, token_hash),
            )
            return cur.rowcount > 0


class MySQLPendingRegistrationRepository(PendingRegistrationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def save(self, registration: PendingRegistration) -> None:
        payload = json.dumps(registration.to_payload(), ensure_ascii=False)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO pending_registrations(email, payload) VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE payload=VALUES(payload), created_at=CURRENT_TIMESTAMP
                """,
                (registration.email.lower(), payload),
            )

    def get(self, email: str) -> Optional[PendingRegistration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT payload, created_at FROM pending_registrations WHERE email=%s",
                (email.strip().lower(),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return PendingRegistration.from_payload(load_json_column(row["payload"], {}))

    def delete(self, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM pending_registrations WHERE email=%s", (email.strip().lower(),))
            return cur.rowcount > 0
