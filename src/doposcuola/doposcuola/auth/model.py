from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import Role, UserStatus
from ..users.model import User


@dataclass(frozen=True)
class AuthIdentity:
    """Login identity held by the auth provider (separate from the profile)."""

    identity_id: str
    email: str
    password_hash: Optional[str] = None


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user_id: str
    email: str
    is_recovery: bool = False


@dataclass(frozen=True)
class PendingRegistration:
    """Registration form data kept until the email is verified.

    The profile row is only written once the auth provider has issued an id
    for the address, so the form has to survive the OTP / magic link round trip.
    """

    email: str
    name: str
    role: Role
    phone: str = ""
    age: Optional[int] = None
    dob: Optional[date] = None
    parent_name: Optional[str] = None
    parent_email: Optional[str] = None
    created_at: Optional[datetime] = field(default=None, compare=False)

    def to_user(self, user_id: str) -> User:
        return User(
            user_id=user_id,
            name=self.name,
            email=self.email,
            role=self.role,
            phone=self.phone,
            age=self.age,
            dob=self.dob,
            status=UserStatus.PENDING,
            parent_name=self.parent_name,
            parent_email=self.parent_email,
        )

    def to_payload(self) -> dict:
        return {
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "phone": self.phone,
            "age": self.age,
            "dob": self.dob.isoformat() if self.dob else None,
            "parent_name": self.parent_name,
            "parent_email": self.parent_email,
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "PendingRegistration":
        dob = payload.get("dob")
        return cls(
            email=payload["email"],
            name=payload["name"],
            role=Role(payload["role"]),
            phone=payload.get("phone") or "",
            age=payload.get("age"),
            dob=date.fromisoformat(dob) if dob else None,
            parent_name=payload.get("parent_name"),
            parent_email=payload.get("parent_email"),
        )


@dataclass(frozen=True)
class SignedIn:
    user: User
    session: AuthSession
