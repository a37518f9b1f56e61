"""Admin HTTP controllers. Every state change is written to the audit log."""

from __future__ import annotations

import logging
from typing import Optional

from flask import Blueprint, jsonify, request
from pydantic import BaseModel, Field, ValidationError

from habitat.core.admin.audit import audit
from habitat.core.errors import HabitatError, NotFoundError
from habitat.core.notifications.dispatcher import NotificationDispatcher
from habitat.core.notifications.events import PropertyStatusChanged
from habitat.core.properties.models import Property
from habitat.core.users.schemas import RoleUpdateRequest, serialize_user
from habitat.core.users.services import require_user, set_role
from habitat.core.utils.decorators import admin_required, super_admin_required
from habitat.core.utils.validation import jsonable_errors
from habitat.extensions import db

logger = logging.getLogger(__name__)

admin_api_bp = Blueprint("admin_api", __name__)


class PropertyStatusRequest(BaseModel):
    status: str = Field(min_length=1, max_length=32)
    note: Optional[str] = None


def _notify_status_change(prop: Property) -> None:
    event = PropertyStatusChanged(
        property_id=prop.id,
        host_id=prop.host_id,
        property_title=prop.title,
        status=prop.status,
    )
    try:
        result = NotificationDispatcher().notify(event)
    except HabitatError as exc:
        logger.info("Status push for property %s not sent: %s", prop.id, exc)
        return
    if not result.ok:
        logger.warning("Status push for property %s partially failed: %s", prop.id, result.error)


@admin_api_bp.patch("/properties/<int:id>/status")
@admin_required
def update_property_status(id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = PropertyStatusRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400

    prop = db.session.get(Property, id)
    if prop is None:
        raise NotFoundError("property not found")

    before = prop.to_dict()
    prop.status = data.status
    prop.review_notes = data.note
    db.session.commit()
    audit("property.status_update", "property", prop.id, before, prop)

    if before["status"] != prop.status:
        _notify_status_change(prop)

    return jsonify({"ok": True, "property": prop.to_dict()})


@admin_api_bp.patch("/users/<int:id>/role")
@super_admin_required
def update_user_role(id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = RoleUpdateRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400

    user = require_user(id)
    before = serialize_user(user).model_dump(by_alias=True)
    try:
        set_role(user, data.role)
    except ValueError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400
    after = serialize_user(user).model_dump(by_alias=True)
    audit("user.role_update", "user", user.id, before, after)
    return jsonify({"ok": True, "user": after})
