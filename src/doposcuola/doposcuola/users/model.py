from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import FrozenSet, Optional

from ..core.constants import MINOR_AGE
from ..core.enums import Capability, Role, UserStatus
from ..core.permissions import capabilities_for


@dataclass(frozen=True)
class User:
    """Domain entity: a registered student or teacher.

    Note: This is a plain data object (no DB access). ``user_id`` is the id
    issued by the auth provider for the same identity.
    """

    user_id: str
    name: str
    email: str
    role: Role
    phone: str = ""
    age: Optional[int] = None
    dob: Optional[date] = None
    status: UserStatus = UserStatus.PENDING
    is_admin: bool = False
    is_leader: bool = False
    parent_name: Optional[str] = None
    parent_email: Optional[str] = None
    created_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def is_minor(self) -> bool:
        return self.age is not None and self.age < MINOR_AGE

    @property
    def is_approved(self) -> bool:
        return self.status == UserStatus.APPROVED

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        return capabilities_for(self)

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role.value,
            "age": self.age,
            "dob": self.dob.isoformat() if self.dob else None,
            "status": self.status.value,
            "is_admin": self.is_admin,
            "is_leader": self.is_leader,
            "parent_name": self.parent_name,
            "parent_email": self.parent_email,
            "capabilities": sorted(c.value for c in self.capabilities),
        }
