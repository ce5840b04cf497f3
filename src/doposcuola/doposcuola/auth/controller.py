from __future__ import annotations

from datetime import timedelta

from flask import Flask, request, session

from ..common.web import SESSION_TOKEN_KEY, current_user, json_view, login_required, ok, request_data
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.exceptions import ValidationError
from .model import SignedIn
from .service import RegistrationForm

RECOVERY_TOKEN_KEY = "recovery_token"


def register(app: Flask, container) -> None:
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    def _start_session(signed_in: SignedIn, *, remember: bool = True):
        session.clear()
        session.permanent = remember
        session[SESSION_TOKEN_KEY] = signed_in.session.access_token
        return ok({"user": signed_in.user.to_dict()})

    @app.route("/auth/register", methods=["POST"], endpoint="auth_register")
    @json_view
    def auth_register():
        data = request_data()
        age = data.get("age")
        try:
            age = int(age) if age not in (None, "") else None
        except (TypeError, ValueError):
            raise ValidationError("Age must be a number")

        form = RegistrationForm(
            name=data.get("name", ""),
            email=data.get("email", ""),
            role=data.get("role", ""),
            phone=data.get("phone", ""),
            dob=data.get("dob", ""),
            age=age,
            parent_name=data.get("parent_name", ""),
            parent_email=data.get("parent_email", ""),
            access_code=data.get("access_code", ""),
        )
        registration = container.auth_service.register(form, redirect_to=data.get("redirect_to"))
        return ok({"email": registration.email, "message": "Check your email for the login code"}, 201)

    @app.route("/auth/login/code", methods=["POST"], endpoint="auth_request_code")
    @json_view
    def auth_request_code():
        data = request_data()
        container.auth_service.request_login_code(data.get("email", ""), redirect_to=data.get("redirect_to"))
        return ok({"message": "Check your email for the login code"})

    @app.route("/auth/login/verify", methods=["POST"], endpoint="auth_verify_code")
    @json_view
    def auth_verify_code():
        data = request_data()
        signed_in = container.auth_service.verify_login_code(data.get("email", ""), data.get("code", ""))
        return _start_session(signed_in)

    @app.route("/auth/magic-link", methods=["GET"], endpoint="auth_magic_link")
    @json_view
    def auth_magic_link():
        signed_in = container.auth_service.verify_magic_link(request.args.get("token", ""))
        return _start_session(signed_in)

    @app.route("/auth/login/password", methods=["POST"], endpoint="auth_password_login")
    @json_view
    def auth_password_login():
        data = request_data()
        signed_in = container.auth_service.login_with_password(data.get("email", ""), data.get("password", ""))
        return _start_session(signed_in, remember=bool(data.get("remember_me", True)))

    @app.route("/auth/logout", methods=["POST"], endpoint="auth_logout")
    @json_view
    def auth_logout():
        container.auth_service.logout(session.get(SESSION_TOKEN_KEY))
        session.clear()
        return ok({"message": "Signed out"})

    @app.route("/auth/me", methods=["GET"], endpoint="auth_me")
    @json_view
    @login_required
    def auth_me():
        return ok({"user": current_user().to_dict()})

    @app.route("/auth/password/forgot", methods=["POST"], endpoint="auth_forgot_password")
    @json_view
    def auth_forgot_password():
        data = request_data()
        container.auth_service.send_password_reset(data.get("email", ""), redirect_to=data.get("redirect_to"))
        # same answer whether or not the address is known
        return ok({"message": "If the address is registered, a recovery link is on its way"})

    @app.route("/auth/recover", methods=["GET"], endpoint="auth_recover")
    @json_view
    def auth_recover():
        recovery = container.auth_service.open_recovery_link(request.args.get("token", ""))
        session.clear()
        session[RECOVERY_TOKEN_KEY] = recovery.access_token
        return ok({"email": recovery.email, "message": "Choose a new password"})

    @app.route("/auth/password/recover", methods=["POST"], endpoint="auth_complete_recovery")
    @json_view
    def auth_complete_recovery():
        data = request_data()
        container.auth_service.complete_password_recovery(session.get(RECOVERY_TOKEN_KEY, ""), data.get("password", ""))
        session.clear()
        return ok({"message": "Password updated. Please sign in again."})

    @app.route("/auth/password/change", methods=["POST"], endpoint="auth_change_password")
    @json_view
    @login_required
    def auth_change_password():
        data = request_data()
        container.auth_service.change_password(session.get(SESSION_TOKEN_KEY, ""), data.get("password", ""))
        return ok({"message": "Password updated"})
