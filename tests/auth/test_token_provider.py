from __future__ import annotations

import pytest

from src.doposcuola.doposcuola.auth.token_provider import digest
from src.doposcuola.doposcuola.core.enums import AuthEvent
from src.doposcuola.doposcuola.core.exceptions import AuthenticationError


def test_otp_mail_carries_code_and_link(auth_provider, outbox):
    auth_provider.sign_in_with_otp("New.User@Example.com", redirect_to="/student")

    message = outbox.messages[-1]
    assert message["to"] == "new.user@example.com"
    assert len(outbox.last_code()) == 6
    assert "http://portal.test/auth/magic-link?token=" in message["text"]
    assert "redirect_to=%2Fstudent" in message["text"]


def test_codes_are_stored_hashed(auth_provider, auth_store, outbox):
    auth_provider.sign_in_with_otp("someone@example.com")

    code = outbox.last_code()
    assert all(t.token_hash != code for t in auth_store.tokens)
    assert any(t.token_hash == digest(code) for t in auth_store.tokens)


def test_code_is_single_use(auth_provider, outbox):
    auth_provider.sign_in_with_otp("someone@example.com")
    code = outbox.last_code()

    auth_provider.verify_otp("someone@example.com", code)
    with pytest.raises(AuthenticationError, match="expired or is invalid"):
        auth_provider.verify_otp("someone@example.com", code)


def test_code_expires(auth_provider, outbox, clock):
    auth_provider.sign_in_with_otp("someone@example.com")
    clock.advance(minutes=11)

    with pytest.raises(AuthenticationError):
        auth_provider.verify_otp("someone@example.com", outbox.last_code())


def test_new_code_invalidates_previous_one(auth_provider, outbox):
    auth_provider.sign_in_with_otp("someone@example.com")
    first = outbox.last_code()
    auth_provider.sign_in_with_otp("someone@example.com")
    second = outbox.last_code()

    if first != second:
        with pytest.raises(AuthenticationError):
            auth_provider.verify_otp("someone@example.com", first)
    assert auth_provider.verify_otp("someone@example.com", second).email == "someone@example.com"


def test_using_the_code_burns_the_link(auth_provider, outbox):
    auth_provider.sign_in_with_otp("someone@example.com")
    code, token = outbox.last_code(), outbox.last_token()

    auth_provider.verify_otp("someone@example.com", code)
    with pytest.raises(AuthenticationError):
        auth_provider.verify_magic_link(token)


def test_code_for_another_address_is_rejected(auth_provider, outbox):
    auth_provider.sign_in_with_otp("one@example.com")
    code = outbox.last_code()
    auth_provider.sign_in_with_otp("two@example.com")

    with pytest.raises(AuthenticationError):
        auth_provider.verify_otp("two@example.com", code if code != outbox.last_code() else "000000x")


def test_events_are_emitted_in_order(auth_provider, student):
    seen = []
    subscription = auth_provider.on_auth_state_change(lambda event, session: seen.append(event))

    session = auth_provider.sign_in_with_password(student.email, "secret123")
    auth_provider.update_password(session, "another-pass")
    auth_provider.sign_out(session)
    subscription.unsubscribe()
    auth_provider.sign_in_with_password(student.email, "another-pass")

    assert seen == [AuthEvent.SIGNED_IN, AuthEvent.USER_UPDATED, AuthEvent.SIGNED_OUT]


def test_session_lookup_and_revocation(auth_provider, student):
    session = auth_provider.sign_in_with_password(student.email, "secret123")

    assert auth_provider.get_session(session.access_token).user_id == student.user_id
    assert auth_provider.get_session("") is None
    assert auth_provider.get_session("bogus") is None

    auth_provider.sign_out(session)
    assert auth_provider.get_session(session.access_token) is None


def test_reset_for_unknown_address_sends_nothing(auth_provider, outbox, auth_store):
    auth_provider.reset_password_for_email("ghost@example.com")

    assert outbox.messages == []
    assert auth_store.get_identity_by_email("ghost@example.com") is None


def test_password_sign_in_without_password_set(auth_provider, outbox):
    auth_provider.sign_in_with_otp("otp-only@example.com")

    with pytest.raises(AuthenticationError, match="Invalid login credentials"):
        auth_provider.sign_in_with_password("otp-only@example.com", "anything")


def test_wrong_codes_lock_the_code_and_link(auth_provider, outbox):
    auth_provider.sign_in_with_otp("someone@example.com")
    code, token = outbox.last_code(), outbox.last_token()
    wrong = f"{(int(code) + 1) % 10**6:06d}"

    for _ in range(4):
        with pytest.raises(AuthenticationError, match="expired or is invalid"):
            auth_provider.verify_otp("someone@example.com", wrong)
    with pytest.raises(AuthenticationError, match="Too many attempts"):
        auth_provider.verify_otp("someone@example.com", wrong)

    with pytest.raises(AuthenticationError):
        auth_provider.verify_otp("someone@example.com", code)
    with pytest.raises(AuthenticationError):
        auth_provider.verify_magic_link(token)

    auth_provider.sign_in_with_otp("someone@example.com")
    assert auth_provider.verify_otp("someone@example.com", outbox.last_code()).email == "someone@example.com"


def test_sessions_expire_after_a_week(auth_provider, student, clock):
    session = auth_provider.sign_in_with_password(student.email, "secret123")

    clock.advance(days=6)
    assert auth_provider.get_session(session.access_token) is not None

    clock.advance(days=2)
    assert auth_provider.get_session(session.access_token) is None


def test_same_listener_is_subscribed_once(auth_provider, student):
    seen = []

    def record(event, session):
        seen.append(event)

    auth_provider.on_auth_state_change(record)
    auth_provider.on_auth_state_change(record)
    auth_provider.sign_in_with_password(student.email, "secret123")

    assert seen == [AuthEvent.SIGNED_IN]
