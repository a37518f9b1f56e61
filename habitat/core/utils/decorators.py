"""Access-control decorators for controllers.

Each policy verifies the access token, rejects with 403 and a JSON
``{error, message}`` body when the policy fails, and otherwise exposes the
subject id to the view as ``flask.g.user_id``.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable, Iterable, Optional, TypeVar

from flask import g, jsonify
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException

from habitat.core.users.models import ADMIN_ROLES, ROLE_SUPER_ADMIN

F = TypeVar("F", bound=Callable)


def _unauthorized():
    return jsonify({"ok": False, "error": "unauthorized", "message": "missing or invalid access token"}), 401


def _forbidden(message: str):
    return jsonify({"ok": False, "error": "forbidden", "message": message}), 403


def _subject_id(claims: dict) -> Optional[int]:
    try:
        return int(claims.get("id"))
    except (TypeError, ValueError):
        return None


def current_user_id() -> Optional[int]:
    """Subject id stored by one of the policies below, if any ran."""
    return g.get("user_id")


def _policy(check: Callable[[dict, dict], Optional[str]]):
    """Build a decorator from ``check(claims, view_kwargs) -> error message | None``."""

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):  # type: ignore[misc]
            try:
                verify_jwt_in_request()
            except JWTExtendedException:
                return _unauthorized()
            claims = get_jwt() or {}
            subject = _subject_id(claims)
            if subject is None:
                return _unauthorized()
            message = check(claims, kwargs)
            if message:
                return _forbidden(message)
            g.user_id = subject
            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def _roles_check(allowed: Iterable[str], message: str):
    allowed = frozenset(allowed)

    def check(claims: dict, _kwargs: dict) -> Optional[str]:
        return None if claims.get("role") in allowed else message

    return check


def _owner_check(claims: dict, kwargs: dict) -> Optional[str]:
    if str(_subject_id(claims)) != str(kwargs.get("id")):
        return "you can only act on your own account"
    return None


authenticated = _policy(lambda _claims, _kwargs: None)
owner_required = _policy(_owner_check)
admin_required = _policy(_roles_check(ADMIN_ROLES, "admin access required"))
super_admin_required = _policy(_roles_check({ROLE_SUPER_ADMIN}, "super_admin access required"))
