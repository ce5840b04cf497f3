from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from ..common.datetime_utils import age_on, parse_iso_date
from ..common.validators import require_email, require_non_empty
from ..core.constants import MINOR_AGE
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, PendingApprovalError, ValidationError
from ..settings.service import SystemSettingsService
from ..users.model import User
from ..users.repository import UserRepository
from .model import AuthSession, PendingRegistration, SignedIn
from .provider import AuthProvider
from .repository import PendingRegistrationRepository

logger = logging.getLogger(__name__)

PENDING_APPROVAL_MESSAGE = "Account created but pending approval by Administrator."


@dataclass(frozen=True)
class RegistrationForm:
    """Raw registration input as typed by the user."""

    name: str
    email: str
    role: str
    phone: str = ""
    dob: str = ""
    age: Optional[int] = None
    parent_name: str = ""
    parent_email: str = ""
    access_code: str = ""


class AuthService:
    """Bridges provider sessions to domain profiles.

    Every sign-in path (OTP code, magic link, password) ends in
    ``_complete_sign_in``, which loads or creates the profile and refuses
    sessions for profiles still waiting for approval.
    """

    def __init__(
        self,
        provider: AuthProvider,
        users: UserRepository,
        pending: PendingRegistrationRepository,
        settings: SystemSettingsService,
        *,
        today: Callable[[], date] = date.today,
    ):
        self._provider = provider
        self._users = users
        self._pending = pending
        self._settings = settings
        self._today = today

    # registration

    def build_registration(self, form: RegistrationForm) -> PendingRegistration:
        name = require_non_empty(form.name, "Name")
        email = require_email(form.email)

        try:
            role = Role((form.role or "").strip().upper())
        except ValueError:
            raise ValidationError("Role must be STUDENT or TEACHER")

        dob = parse_iso_date(form.dob) if form.dob and form.dob.strip() else None
        if dob is not None:
            if dob > self._today():
                raise ValidationError("Date of birth cannot be in the future")
            age = age_on(dob, self._today())
        elif form.age is not None:
            age = int(form.age)
        else:
            raise ValidationError("Date of birth is required")

        parent_name = parent_email = None
        if age < MINOR_AGE:
            if not (form.parent_name or "").strip() or not (form.parent_email or "").strip():
                raise ValidationError("Parent details required for minors.")
            parent_name = form.parent_name.strip()
            parent_email = require_email(form.parent_email, "Parent email")

        return PendingRegistration(
            email=email,
            name=name,
            role=role,
            phone=(form.phone or "").strip(),
            age=age,
            dob=dob,
            parent_name=parent_name,
            parent_email=parent_email,
        )

    def register(self, form: RegistrationForm, *, redirect_to: Optional[str] = None) -> PendingRegistration:
        """Validate, park the form data and start the email OTP flow.

        The profile itself is created when the code or link is verified.
        """

        if not self._settings.check_access_code(form.access_code):
            raise ValidationError("Invalid school access code")

        registration = self.build_registration(form)
        if self._users.get_by_email(registration.email):
            raise ValidationError("An account with this email already exists")

        self._pending.save(registration)
        self._provider.sign_in_with_otp(registration.email, redirect_to=redirect_to)
        logger.info("Registration started for %s (%s)", registration.email, registration.role.value)
        return registration

    # sign-in

    def request_login_code(self, email: str, *, redirect_to: Optional[str] = None) -> None:
        self._provider.sign_in_with_otp(email, redirect_to=redirect_to)

    def verify_login_code(self, email: str, code: str) -> SignedIn:
        return self._complete_sign_in(self._provider.verify_otp(email, code))

    def verify_magic_link(self, token: str) -> SignedIn:
        return self._complete_sign_in(self._provider.verify_magic_link(token))

    def login_with_password(self, email: str, password: str) -> SignedIn:
        return self._complete_sign_in(self._provider.sign_in_with_password(email, password))

    def _complete_sign_in(self, session: AuthSession) -> SignedIn:
        profile = self._users.get_by_id(session.user_id)

        if profile is None:
            pending = self._pending.get(session.email)
            if pending is not None and pending.email.lower() == session.email.lower():
                profile = self._users.upsert_profile(pending.to_user(session.user_id))
                self._pending.delete(pending.email)
                logger.info("Profile %s created from pending registration", profile.user_id)

        if profile is None:
            self._provider.sign_out(session)
            raise AuthenticationError("No profile found for this account. Please register first.")

        if not profile.is_approved:
            self._provider.sign_out(session)
            raise PendingApprovalError(PENDING_APPROVAL_MESSAGE)

        return SignedIn(user=profile, session=session)

    def current_user(self, access_token: Optional[str]) -> Optional[User]:
        """The approved profile behind an access token, or None.

        Re-checked on every call so a profile that is deleted (or was never
        approved) loses access even with a live session.
        """

        session = self._provider.get_session(access_token or "")
        if session is None or session.is_recovery:
            return None

        profile = self._users.get_by_id(session.user_id)
        if profile is None or not profile.is_approved:
            return None
        return profile

    def logout(self, access_token: Optional[str]) -> None:
        session = self._provider.get_session(access_token or "")
        if session is not None:
            self._provider.sign_out(session)

    # passwords

    def send_password_reset(self, email: str, *, redirect_to: Optional[str] = None) -> None:
        self._provider.reset_password_for_email(email, redirect_to=redirect_to)

    def open_recovery_link(self, token: str) -> AuthSession:
        return self._provider.verify_recovery(token)

    def complete_password_recovery(self, access_token: str, new_password: str) -> None:
        """Set the new password and close the recovery session.

        The user then signs in normally with the new password.
        """

        session = self._provider.get_session(access_token or "")
        if session is None or not session.is_recovery:
            raise AuthenticationError("Recovery link expired. Request a new one.")

        self._provider.update_password(session, new_password)
        self._provider.sign_out(session)

    def change_password(self, access_token: str, new_password: str) -> None:
        session = self._provider.get_session(access_token or "")
        if session is None or self.current_user(access_token) is None:
            raise AuthenticationError("Session expired. Please sign in again.")
        self._provider.update_password(session, new_password)
