"""Best-effort audit trail for admin actions.

``audit`` never raises: a failed write is rolled back and logged so that an
audit-store outage cannot block the admin operation being recorded.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from flask import request
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import PyJWTError
from sqlalchemy.exc import SQLAlchemyError

from habitat.core.admin.models import AuditLog
from habitat.extensions import db

logger = logging.getLogger(__name__)


def _serialize(state: Any) -> str:
    if state is None:
        return ""
    if hasattr(state, "to_dict"):
        state = state.to_dict()
    try:
        return json.dumps(state, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return ""


def _actor_id() -> int:
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return 0
    claims = get_jwt() or {}
    try:
        return int(claims.get("id") or 0)
    except (TypeError, ValueError):
        return 0


def client_ip() -> str:
    """First X-Forwarded-For hop, else the peer host."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    peer = request.remote_addr or ""
    if peer.count(":") == 1:
        # host:port; bare IPv6 addresses contain several colons
        peer = peer.rsplit(":", 1)[0]
    return peer


def audit(action: str, resource_type: str, resource_id: int, before: Any = None, after: Any = None) -> None:
    entry = AuditLog(
        admin_user_id=_actor_id(),
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        before_json=_serialize(before),
        after_json=_serialize(after),
        ip_address=client_ip(),
    )
    try:
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to write audit log %s for %s/%s", action, resource_type, resource_id)
