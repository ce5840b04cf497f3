from __future__ import annotations

from typing import FrozenSet

from .enums import Capability, Role, UserStatus
from .exceptions import AuthorizationError

_ROLE_CAPABILITIES = {
    Role.STUDENT: frozenset({Capability.BOOK}),
    Role.TEACHER: frozenset({Capability.CLAIM}),
}

_LEADER_CAPABILITIES = frozenset(
    {
        Capability.ANNOUNCE,
        Capability.MANAGE_HOLIDAYS,
        Capability.CONFIGURE_CLASS_DAYS,
        Capability.LIST_EMAILS,
    }
)

_ADMIN_CAPABILITIES = _LEADER_CAPABILITIES | frozenset(
    {
        Capability.APPROVE_USERS,
        Capability.MANAGE_USERS,
        Capability.MANAGE_SUBJECTS,
        Capability.VIEW_REPORTS,
        Capability.MANAGE_ACCESS_CODE,
    }
)


def capabilities_for(user) -> FrozenSet[Capability]:
    """Capability set for a user profile.

    Admins get every leader capability too; pending profiles get nothing.
    """

    if user is None or user.status != UserStatus.APPROVED:
        return frozenset()

    caps = set(_ROLE_CAPABILITIES.get(user.role, frozenset()))
    if user.is_leader:
        caps |= _LEADER_CAPABILITIES
    if user.is_admin:
        caps |= _ADMIN_CAPABILITIES
    return frozenset(caps)


def require(user, capability: Capability) -> None:
    if capability not in capabilities_for(user):
        raise AuthorizationError("You do not have permission for this action")
