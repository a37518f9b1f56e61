"""User controllers (API only)."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from habitat.core.users.schemas import NotificationConsentRequest, PushTokenRequest, serialize_user
from habitat.core.users.services import alter_push_token, require_user, set_allows_notifications
from habitat.core.utils.decorators import owner_required
from habitat.core.utils.validation import jsonable_errors

user_api_bp = Blueprint("user_api", __name__)


@user_api_bp.get("/<int:id>")
@owner_required
def api_get_user(id: int):
    user = require_user(id)
    return jsonify({"ok": True, "user": serialize_user(user).model_dump(by_alias=True)})


@user_api_bp.patch("/<int:id>/pushtoken")
@owner_required
def api_push_token(id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = PushTokenRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400

    user = require_user(id)
    alter_push_token(user, data.op, data.token)
    return "", 204


@user_api_bp.patch("/<int:id>/settings/notifications")
@owner_required
def api_notification_consent(id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = NotificationConsentRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400

    user = require_user(id)
    set_allows_notifications(user, data.allows_notifications)
    return "", 204
