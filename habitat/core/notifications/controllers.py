"""Notification HTTP controllers (API only)."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt
from pydantic import ValidationError

from habitat.core.errors import ForbiddenError, status_for
from habitat.core.notifications.dispatcher import DispatchResult, NotificationDispatcher
from habitat.core.notifications.events import custom_payload
from habitat.core.notifications.scheduling import schedule_welcome
from habitat.core.notifications.schemas import NotificationSettingsRequest, TestPushRequest, WelcomeRequest
from habitat.core.users.models import ADMIN_ROLES
from habitat.core.users.services import require_user, set_allows_notifications
from habitat.core.utils.decorators import admin_required, authenticated, current_user_id
from habitat.core.utils.validation import jsonable_errors
from habitat.extensions import db

logger = logging.getLogger(__name__)

notifications_api_bp = Blueprint("notifications_api", __name__)

# Per-category switches are not stored yet; every category is on.
DEFAULT_CATEGORIES = {
    "reservations": True,
    "messages": True,
    "propertyUpdates": True,
    "experienceBookings": True,
    "videoInteractions": True,
    "reminders": True,
}


def _bad_request(exc: ValidationError):
    return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400


def _outcome(result: DispatchResult) -> dict:
    return {
        "attempted": len(result.attempted),
        "delivered": len(result.delivered),
        "invalidTokens": result.invalid_tokens,
    }


@notifications_api_bp.get("/settings")
@authenticated
def get_settings():
    user = require_user(current_user_id())
    return jsonify(
        {
            "ok": True,
            "allowsNotifications": user.allows_notifications,
            "hasTokens": user.push_tokens is not None,
            **DEFAULT_CATEGORIES,
        }
    )


@notifications_api_bp.put("/settings")
@authenticated
def update_settings():
    payload = request.get_json(silent=True) or {}
    try:
        data = NotificationSettingsRequest.model_validate(payload)
    except ValidationError as exc:
        return _bad_request(exc)
    user = require_user(current_user_id())
    set_allows_notifications(user, data.allows_notifications)
    return jsonify({"ok": True, "allowsNotifications": user.allows_notifications})


@notifications_api_bp.post("/test-push")
@admin_required
def test_push():
    payload = request.get_json(silent=True) or {}
    try:
        data = TestPushRequest.model_validate(payload)
    except ValidationError as exc:
        return _bad_request(exc)

    result = NotificationDispatcher().send_to_user(
        data.user_id, custom_payload(data.user_id, data.title, data.body, data.type)
    )
    if result.error is not None:
        err = result.error
        return jsonify({"ok": False, "error": err.code, "message": str(err), **_outcome(result)}), status_for(err)
    return jsonify({"ok": True, **_outcome(result)})


@notifications_api_bp.post("/test-detailed/<int:user_id>")
@admin_required
def test_detailed(user_id: int):
    dispatcher = NotificationDispatcher()
    tokens = dispatcher.registry.tokens_for(user_id)
    title = "🧪 Detailed Test Notification"
    body = f"This is a detailed test for user {user_id} with {len(tokens)} tokens"
    logger.info("Detailed test push to user %s across %d token(s)", user_id, len(tokens))

    result = dispatcher.send_to_user(user_id, custom_payload(user_id, title, body, "test"))
    body_json = {"userId": user_id, "tokensCount": len(tokens), "title": title, "body": body, **_outcome(result)}
    if result.error is not None:
        err = result.error
        return jsonify({"ok": False, "error": err.code, "message": str(err), **body_json}), status_for(err)
    return jsonify({"ok": True, **body_json})


@notifications_api_bp.post("/welcome")
@authenticated
def welcome():
    payload = request.get_json(silent=True) or {}
    try:
        data = WelcomeRequest.model_validate(payload)
    except ValidationError as exc:
        return _bad_request(exc)

    if data.user_id != current_user_id() and get_jwt().get("role") not in ADMIN_ROLES:
        raise ForbiddenError("cannot schedule a welcome for another user")
    user = require_user(data.user_id)
    message = schedule_welcome(user.id, user.first_name or "")
    db.session.commit()
    return jsonify({"ok": True, "scheduledAt": message.available_at.isoformat()}), 202
