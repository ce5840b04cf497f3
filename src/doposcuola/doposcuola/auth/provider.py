from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

from ..core.enums import AuthEvent
from .model import AuthSession

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]


class AuthSubscription:
    def __init__(self, listeners: List[AuthListener], callback: AuthListener):
        self._listeners = listeners
        self._callback = callback

    def unsubscribe(self) -> None:
        if self._callback in self._listeners:
            self._listeners.remove(self._callback)


class AuthStateEmitter:
    """Synchronous fan-out of auth state changes, in registration order."""

    def __init__(self) -> None:
        self._listeners: List[AuthListener] = []

    def subscribe(self, callback: AuthListener) -> AuthSubscription:
        # A listener registered twice still hears each event once.
        if callback not in self._listeners:
            self._listeners.append(callback)
        return AuthSubscription(self._listeners, callback)

    def emit(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        for callback in list(self._listeners):
            callback(event, session)


class AuthProvider(Protocol):
    """Email OTP / magic link / password authentication.

    Methods raise ``AuthenticationError`` for bad credentials or tokens and
    ``MailDeliveryError`` when a code or link cannot be sent.
    """

    def sign_in_with_otp(self, email: str, *, redirect_to: Optional[str] = None) -> None:
        raise NotImplementedError

    def verify_otp(self, email: str, code: str) -> AuthSession:
        raise NotImplementedError

    def verify_magic_link(self, token: str) -> AuthSession:
        raise NotImplementedError

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        raise NotImplementedError

    def reset_password_for_email(self, email: str, *, redirect_to: Optional[str] = None) -> None:
        raise NotImplementedError

    def verify_recovery(self, token: str) -> AuthSession:
        raise NotImplementedError

    def update_password(self, session: AuthSession, password: str) -> None:
        raise NotImplementedError

    def get_session(self, access_token: str) -> Optional[AuthSession]:
        raise NotImplementedError

    def sign_out(self, session: AuthSession) -> None:
        raise NotImplementedError

    def on_auth_state_change(self, callback: AuthListener) -> AuthSubscription:
        raise NotImplementedError


def log_auth_event(event: AuthEvent, session: Optional[AuthSession]) -> None:
    logger.info("Auth event %s for %s", event.value, session.email if session else "-")
