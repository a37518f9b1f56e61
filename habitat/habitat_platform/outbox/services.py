"""Outbox staging helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from habitat.extensions import db
from habitat.habitat_platform.outbox.models import OutboxMessage

STATUS_PENDING = "pending"
STATUS_SENDING = "sending"
STATUS_SENT = "sent"
STATUS_RETRY = "retry"
STATUS_FAILED = "failed"

READY_STATUSES = (STATUS_PENDING, STATUS_RETRY)


def enqueue(
    event_type: str,
    payload: dict,
    user_id: Optional[int],
    available_at: Optional[datetime] = None,
) -> OutboxMessage:
    """
    Stage a message in the outbox. Caller commits alongside its domain changes.
    """
    message = OutboxMessage(
        event_type=event_type,
        payload=payload or {},
        user_id=user_id,
        available_at=available_at or datetime.utcnow(),
        status=STATUS_PENDING,
        attempts=0,
    )
    db.session.add(message)
    return message
