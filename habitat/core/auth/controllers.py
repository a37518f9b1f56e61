"""Auth HTTP controllers (API only)."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from habitat.core.auth.password import verify_password
from habitat.core.auth.schemas import LoginRequest, RefreshTokenRequest
from habitat.core.auth.token_service import TokenService
from habitat.core.users.models import User
from habitat.core.users.schemas import serialize_user
from habitat.core.utils.validation import jsonable_errors
from habitat.extensions import limiter

auth_bp = Blueprint("auth_api", __name__)


def authenticate_user(email: str, password: str) -> User | None:
    """Return the user if credentials are valid."""
    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


@auth_bp.post("/login")
@limiter.limit("10/minute")
def login():
    payload = request.get_json(silent=True) or {}
    try:
        data = LoginRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400

    user = authenticate_user(data.email, data.password)
    if not user:
        return jsonify({"ok": False, "error": "invalid_credentials"}), 401

    pair = TokenService().issue(user.id)
    return jsonify({"ok": True, **pair.to_dict(), "user": serialize_user(user).model_dump(by_alias=True)})


@auth_bp.post("/refresh")
@limiter.limit("30/minute")
def refresh():
    payload = request.get_json(silent=True) or {}
    try:
        data = RefreshTokenRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400

    # Token-service errors (not found, forbidden, internal) render via the app error handler.
    pair = TokenService().refresh(data.refresh_token)
    return jsonify(pair.to_dict())


@auth_bp.post("/logout")
def logout():
    payload = request.get_json(silent=True) or {}
    try:
        data = RefreshTokenRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400

    TokenService().revoke(data.refresh_token)
    return jsonify({"ok": True})
