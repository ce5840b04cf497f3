from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Base role chosen at registration."""

    STUDENT = "STUDENT"
    TEACHER = "TEACHER"


class UserStatus(str, Enum):
    """Approval state of a registered profile."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"


class AttendanceMark(str, Enum):
    PENDING = "PENDING"
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"


class AuthEvent(str, Enum):
    """Session events emitted by the auth provider."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    USER_UPDATED = "USER_UPDATED"


class TokenPurpose(str, Enum):
    OTP = "OTP"
    MAGIC_LINK = "MAGIC_LINK"
    RECOVERY = "RECOVERY"


class Capability(str, Enum):
    """What a signed-in user may do. Derived from role and flags, never stored."""

    BOOK = "BOOK"
    CLAIM = "CLAIM"
    ANNOUNCE = "ANNOUNCE"
    MANAGE_HOLIDAYS = "MANAGE_HOLIDAYS"
    CONFIGURE_CLASS_DAYS = "CONFIGURE_CLASS_DAYS"
    LIST_EMAILS = "LIST_EMAILS"
    APPROVE_USERS = "APPROVE_USERS"
    MANAGE_USERS = "MANAGE_USERS"
    MANAGE_SUBJECTS = "MANAGE_SUBJECTS"
    VIEW_REPORTS = "VIEW_REPORTS"
    MANAGE_ACCESS_CODE = "MANAGE_ACCESS_CODE"
