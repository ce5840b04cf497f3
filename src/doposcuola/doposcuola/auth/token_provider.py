from __future__ import annotations

import hashlib
import logging
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional
from urllib.parse import urlencode

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_email, require_min_length
from ..core.constants import (
    DEFAULT_SESSION_DAYS,
    MAX_OTP_ATTEMPTS,
    MIN_PASSWORD_LENGTH,
    OTP_LENGTH,
    TOKEN_TTL_MINUTES,
)
from ..core.enums import AuthEvent, TokenPurpose
from ..core.exceptions import AuthenticationError
from ..mail.mailer import Mailer, login_code_message, recovery_message
from .model import AuthIdentity, AuthSession
from .provider import AuthListener, AuthProvider, AuthStateEmitter, AuthSubscription
from .repository import AuthStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"
INVALID_TOKEN = "Token has expired or is invalid"
TOO_MANY_ATTEMPTS = "Too many attempts. Please request a new code."


def digest(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


class TokenAuthProvider(AuthProvider):
    """Auth provider backed by the ``auth_*`` tables.

    One-time codes and links are single use and expire after
    ``TOKEN_TTL_MINUTES``. Issuing a new code invalidates the previous ones.
    """

    def __init__(
        self,
        store: AuthStore,
        mailer: Mailer,
        *,
        public_url: str,
        clock: Callable[[], datetime] = now_local,
        token_ttl: timedelta = timedelta(minutes=TOKEN_TTL_MINUTES),
        session_ttl: timedelta = timedelta(days=DEFAULT_SESSION_DAYS),
    ):
        self._store = store
        self._mailer = mailer
        self._public_url = public_url.rstrip("/")
        self._clock = clock
        self._token_ttl = token_ttl
        self._session_ttl = session_ttl
        self._events = AuthStateEmitter()

    def _link(self, path: str, token: str, redirect_to: Optional[str]) -> str:
        params = {"token": token}
        if redirect_to:
            params["redirect_to"] = redirect_to
        return f"{self._public_url}{path}?{urlencode(params)}"

    def _identity_for(self, email: str, *, create: bool) -> Optional[AuthIdentity]:
        identity = self._store.get_identity_by_email(email)
        if identity is None and create:
            identity = self._store.create_identity(identity_id=str(uuid.uuid4()), email=email)
            logger.info("Auth identity created for %s", email)
        return identity

    def _start_session(self, identity_id: str, event: AuthEvent, *, is_recovery: bool = False) -> AuthSession:
        identity = self._store.get_identity(identity_id)
        if identity is None:
            raise AuthenticationError(INVALID_TOKEN)

        access_token = secrets.token_urlsafe(32)
        self._store.create_session(
            identity_id=identity_id,
            token_hash=digest(access_token),
            is_recovery=is_recovery,
            created_at=self._clock(),
        )
        self._store.touch_sign_in(identity_id, at=self._clock())

        session = AuthSession(
            access_token=access_token,
            user_id=identity.identity_id,
            email=identity.email,
            is_recovery=is_recovery,
        )
        self._events.emit(event, session)
        return session

    def sign_in_with_otp(self, email: str, *, redirect_to: Optional[str] = None) -> None:
        email = require_email(email)
        identity = self._identity_for(email, create=True)
        now = self._clock()

        self._store.invalidate_tokens(
            identity_id=identity.identity_id,
            purposes=(TokenPurpose.OTP, TokenPurpose.MAGIC_LINK),
            at=now,
        )

        code = f"{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}"
        link_token = secrets.token_urlsafe(32)
        expires_at = now + self._token_ttl
        self._store.add_token(
            identity_id=identity.identity_id, purpose=TokenPurpose.OTP, token_hash=digest(code), expires_at=expires_at
        )
        self._store.add_token(
            identity_id=identity.identity_id,
            purpose=TokenPurpose.MAGIC_LINK,
            token_hash=digest(link_token),
            expires_at=expires_at,
        )

        subject, text = login_code_message(code=code, link=self._link("/auth/magic-link", link_token, redirect_to))
        self._mailer.send(to=email, subject=subject, text=text)

    def verify_otp(self, email: str, code: str) -> AuthSession:
        identity = self._store.get_identity_by_email((email or "").strip())
        if identity is None:
            raise AuthenticationError(INVALID_TOKEN)

        identity_id = self._store.consume_token(
            purpose=TokenPurpose.OTP,
            token_hash=digest((code or "").strip()),
            now=self._clock(),
            identity_id=identity.identity_id,
        )
        if identity_id is None:
            attempts = self._store.record_failed_attempt(
                identity_id=identity.identity_id, purpose=TokenPurpose.OTP, now=self._clock()
            )
            if attempts >= MAX_OTP_ATTEMPTS:
                # The magic link was sent with the same code; drop both.
                self._store.invalidate_tokens(
                    identity_id=identity.identity_id,
                    purposes=(TokenPurpose.OTP, TokenPurpose.MAGIC_LINK),
                    at=self._clock(),
                )
                logger.warning("Login code locked after %s wrong attempts for %s", attempts, identity.email)
                raise AuthenticationError(TOO_MANY_ATTEMPTS)
            raise AuthenticationError(INVALID_TOKEN)

        self._store.invalidate_tokens(identity_id=identity_id, purposes=(TokenPurpose.MAGIC_LINK,), at=self._clock())
        return self._start_session(identity_id, AuthEvent.SIGNED_IN)

    def verify_magic_link(self, token: str) -> AuthSession:
        identity_id = self._store.consume_token(
            purpose=TokenPurpose.MAGIC_LINK, token_hash=digest(token or ""), now=self._clock()
        )
        if identity_id is None:
            raise AuthenticationError(INVALID_TOKEN)

        self._store.invalidate_tokens(identity_id=identity_id, purposes=(TokenPurpose.OTP,), at=self._clock())
        return self._start_session(identity_id, AuthEvent.SIGNED_IN)

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        identity = self._store.get_identity_by_email((email or "").strip())
        if identity is None or not identity.password_hash:
            raise AuthenticationError(INVALID_CREDENTIALS)

        try:
            ok = check_password_hash(identity.password_hash, password or "")
        except ValueError:
            # unknown hash method in a corrupted or placeholder value
            ok = False
        if not ok:
            raise AuthenticationError(INVALID_CREDENTIALS)

        return self._start_session(identity.identity_id, AuthEvent.SIGNED_IN)

    def reset_password_for_email(self, email: str, *, redirect_to: Optional[str] = None) -> None:
        email = require_email(email)
        identity = self._identity_for(email, create=False)
        if identity is None:
            # Same answer as for a known address.
            logger.info("Password reset requested for unknown address %s", email)
            return

        now = self._clock()
        self._store.invalidate_tokens(identity_id=identity.identity_id, purposes=(TokenPurpose.RECOVERY,), at=now)
        token = secrets.token_urlsafe(32)
        self._store.add_token(
            identity_id=identity.identity_id,
            purpose=TokenPurpose.RECOVERY,
            token_hash=digest(token),
            expires_at=now + self._token_ttl,
        )

        subject, text = recovery_message(link=self._link("/auth/recover", token, redirect_to))
        self._mailer.send(to=identity.email, subject=subject, text=text)

    def verify_recovery(self, token: str) -> AuthSession:
        identity_id = self._store.consume_token(
            purpose=TokenPurpose.RECOVERY, token_hash=digest(token or ""), now=self._clock()
        )
        if identity_id is None:
            raise AuthenticationError(INVALID_TOKEN)
        return self._start_session(identity_id, AuthEvent.PASSWORD_RECOVERY, is_recovery=True)

    def update_password(self, session: AuthSession, password: str) -> None:
        if self.get_session(session.access_token) is None:
            raise AuthenticationError("Session expired. Please sign in again.")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        self._store.set_password_hash(session.user_id, generate_password_hash(password))
        self._events.emit(AuthEvent.USER_UPDATED, session)

    def get_session(self, access_token: str) -> Optional[AuthSession]:
        if not access_token:
            return None
        stored = self._store.get_session(digest(access_token), created_after=self._clock() - self._session_ttl)
        if stored is None:
            return None
        return AuthSession(
            access_token=access_token,
            user_id=stored.user_id,
            email=stored.email,
            is_recovery=stored.is_recovery,
        )

    def sign_out(self, session: AuthSession) -> None:
        self._store.revoke_session(digest(session.access_token), at=self._clock())
        self._events.emit(AuthEvent.SIGNED_OUT, session)

    def on_auth_state_change(self, callback: AuthListener) -> AuthSubscription:
        return self._events.subscribe(callback)
