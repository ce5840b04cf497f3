from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TokenPurpose
from .model import AuthIdentity, AuthSession, PendingRegistration


class AuthStore(Protocol):
    """Persistence for identities, one-time tokens and sessions.

    Token and session secrets are stored as SHA-256 hex digests only.
    """

    def get_identity_by_email(self, email: str) -> Optional[AuthIdentity]:
        raise NotImplementedError

    def get_identity(self, identity_id: str) -> Optional[AuthIdentity]:
        raise NotImplementedError

    def create_identity(self, *, identity_id: str, email: str) -> AuthIdentity:
        raise NotImplementedError

    def set_password_hash(self, identity_id: str, password_hash: str) -> bool:
        raise NotImplementedError

    def touch_sign_in(self, identity_id: str, *, at: datetime) -> None:
        raise NotImplementedError

    def add_token(self, *, identity_id: str, purpose: TokenPurpose, token_hash: str, expires_at: datetime) -> None:
        raise NotImplementedError

    def invalidate_tokens(self, *, identity_id: str, purposes: Sequence[TokenPurpose], at: datetime) -> None:
        raise NotImplementedError

    def consume_token(
        self,
        *,
        purpose: TokenPurpose,
        token_hash: str,
        now: datetime,
        identity_id: Optional[str] = None,
    ) -> Optional[str]:
        """Mark a live token as used; return its identity id, or None if no live token matched."""

        raise NotImplementedError

    def record_failed_attempt(self, *, identity_id: str, purpose: TokenPurpose, now: datetime) -> int:
        """Count a wrong guess against the identity's live tokens; return the highest count (0 if none)."""

        raise NotImplementedError

    def create_session(
        self, *, identity_id: str, token_hash: str, is_recovery: bool, created_at: datetime
    ) -> None:
        raise NotImplementedError

    def get_session(self, token_hash: str, *, created_after: datetime) -> Optional[AuthSession]:
        """Unrevoked session by token digest started after ``created_after``; ``access_token`` is left empty."""

        raise NotImplementedError

    def revoke_session(self, token_hash: str, *, at: datetime) -> bool:
        raise NotImplementedError


class PendingRegistrationRepository(Protocol):
    def save(self, registration: PendingRegistration) -> None:
        raise NotImplementedError

    def get(self, email: str) -> Optional[PendingRegistration]:
        raise NotImplementedError

    def delete(self, email: str) -> bool:
        raise NotImplementedError
