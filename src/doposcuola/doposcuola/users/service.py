from __future__ import annotations

import logging
from typing import Sequence

from ..core.enums import Capability, Role, UserStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import require
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Use cases: approve, promote and remove users (admin), list emails (leader)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def _get_existing(self, user_id: str) -> User:
        user = self._users.get_by_id(str(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_all(self, *, actor: User) -> Sequence[User]:
        require(actor, Capability.MANAGE_USERS)
        return self._users.list_all()

    def list_pending(self, *, actor: User) -> Sequence[User]:
        require(actor, Capability.APPROVE_USERS)
        return self._users.list_pending()

    def approve(self, *, actor: User, user_id: str) -> None:
        require(actor, Capability.APPROVE_USERS)
        user = self._get_existing(user_id)
        if user.status == UserStatus.APPROVED:
            return
        self._users.set_status(user.user_id, UserStatus.APPROVED)
        logger.info("User %s approved by %s", user.user_id, actor.user_id)

    def reject(self, *, actor: User, user_id: str) -> None:
        """Rejecting a pending registration removes the profile."""

        require(actor, Capability.APPROVE_USERS)
        user = self._get_existing(user_id)
        if user.status != UserStatus.PENDING:
            raise ValidationError("Only pending registrations can be rejected")
        self._users.delete_by_id(user.user_id)
        logger.info("Registration %s rejected by %s", user.user_id, actor.user_id)

    def delete_user(self, *, actor: User, user_id: str) -> None:
        require(actor, Capability.MANAGE_USERS)
        user = self._get_existing(user_id)
        if user.user_id == actor.user_id:
            raise ValidationError("You cannot delete your own account")

        if not self._users.delete_by_id(user.user_id):
            raise ValidationError("Failed to delete user")
        logger.info("User %s deleted by %s", user.user_id, actor.user_id)

    def toggle_leader(self, *, actor: User, user_id: str) -> bool:
        """Flip the leader flag and return the new value."""

        require(actor, Capability.MANAGE_USERS)
        user = self._get_existing(user_id)
        if user.role != Role.TEACHER:
            raise ValidationError("Only teachers can be promoted to leader")

        new_value = not user.is_leader
        self._users.set_leader(user.user_id, is_leader=new_value)
        return new_value

    def list_emails(self, *, actor: User) -> Sequence[str]:
        require(actor, Capability.LIST_EMAILS)
        return self._users.list_emails()
