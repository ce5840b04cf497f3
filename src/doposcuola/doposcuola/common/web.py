"""Helpers shared by the feature controllers.

Views return JSON. Domain errors become ``{"success": False, "code", "message"}``
with a status picked from the exception type; anything else is logged and
answered with a generic 500.
"""

from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Optional

from flask import current_app, g, jsonify, request, session

from ..core.enums import Capability
from ..core.exceptions import (
    AlreadyClaimedError,
    AuthenticationError,
    AuthorizationError,
    BookingLimitExceeded,
    DomainError,
    DuplicateSubjectError,
    NotFoundError,
    PendingApprovalError,
    ValidationError,
)
from ..users.model import User
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

EXTENSION_KEY = "doposcuola"
SESSION_TOKEN_KEY = "access_token"

# first match wins, so subclasses come before their bases
_STATUS_BY_ERROR = (
    (PendingApprovalError, 403),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (BookingLimitExceeded, 409),
    (DuplicateSubjectError, 409),
    (AlreadyClaimedError, 409),
    (ValidationError, 400),
)


def get_container():
    return current_app.extensions[EXTENSION_KEY]


def status_for(exc: DomainError) -> int:
    for exc_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, exc_type):
            return status
    return 400


def error_response(exc: DomainError):
    return jsonify({"success": False, "code": exc.code, "message": str(exc)}), status_for(exc)


def ok(payload: Optional[dict] = None, status: int = 200):
    body = {"success": True}
    body.update(payload or {})
    return jsonify(body), status


def json_view(view):
    """Turn raised domain errors into JSON error responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            logger.exception("Unhandled error in %s", request.path)
            if bool(current_app.config.get("DEBUG", False)):
                message = f"Internal error: {e}"
            else:
                message = "Internal error"
            return jsonify({"success": False, "code": "INTERNAL_ERROR", "message": message}), 500

    return wrapper


def current_user() -> Optional[User]:
    """Approved profile for the session's access token, resolved once per request."""

    if "current_user" not in g:
        token = session.get(SESSION_TOKEN_KEY)
        g.current_user = get_container().auth_service.current_user(token) if token else None
    return g.current_user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            session.pop(SESSION_TOKEN_KEY, None)
            return jsonify({"success": False, "code": "UNAUTHENTICATED", "message": "Please sign in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def capability_required(capability: Capability):
    def decorator(view):
        @wraps(view)
        @login_required
        def wrapper(*args, **kwargs):
            if not current_user().can(capability):
                return (
                    jsonify({"success": False, "code": "FORBIDDEN", "message": "You do not have permission for this action"}),
                    403,
                )
            return view(*args, **kwargs)

        return wrapper

    return decorator


def request_data() -> dict:
    """JSON body, or form fields for plain form posts."""

    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def date_arg(value: Optional[str], *, default: Optional[date] = None) -> date:
    if not value:
        if default is None:
            raise ValidationError("Date is required")
        return default
    return parse_iso_date(value)
