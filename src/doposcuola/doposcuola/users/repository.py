from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User


class UserRepository(Protocol):
    """Repository interface for user profiles.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup."""

        raise NotImplementedError

    def upsert_profile(self, user: User) -> User:
        """Insert or replace the profile row keyed by ``user.user_id``."""

        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def list_pending(self) -> Sequence[User]:
        raise NotImplementedError

    def list_emails(self) -> Sequence[str]:
        raise NotImplementedError

    def set_status(self, user_id: str, status) -> bool:
        raise NotImplementedError

    def set_leader(self, user_id: str, *, is_leader: bool) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: str) -> bool:
        raise NotImplementedError
