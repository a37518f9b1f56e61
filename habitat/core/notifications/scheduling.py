"""Deferred notifications staged in the outbox and the worker-side router.

Welcome pushes and reservation reminders are written to the outbox with an
``available_at`` in the future; the worker calls ``handle_outbox_message``
once they are due.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from flask import current_app

from habitat.core.errors import CorruptTokensError, NotPermittedError, UserMissingError
from habitat.core.notifications.dispatcher import DispatchResult, NotificationDispatcher
from habitat.core.notifications.events import ReservationReminder
from habitat.habitat_platform.outbox.models import OutboxMessage
from habitat.habitat_platform.outbox.services import enqueue

logger = logging.getLogger(__name__)

WELCOME_EVENT = "notifications.welcome"
REMINDER_EVENT = "notifications.reservation_reminder"


def schedule_welcome(user_id: int, first_name: str, delay: Optional[float] = None) -> OutboxMessage:
    """Stage the welcome push; the caller commits."""
    if delay is None:
        delay = float(current_app.config.get("WELCOME_NOTIFICATION_DELAY_SECONDS", 2.0))
    return enqueue(
        WELCOME_EVENT,
        {"userId": user_id, "firstName": first_name},
        user_id,
        available_at=datetime.utcnow() + timedelta(seconds=delay),
    )


def schedule_reservation_reminder(
    reservation_id: int,
    property_id: int,
    guest_id: int,
    property_title: str,
    days_until: int,
    send_at: Optional[datetime] = None,
) -> OutboxMessage:
    """Stage a reminder for ``send_at`` (now by default); the caller commits."""
    # Validates days_until before anything is staged.
    ReservationReminder(reservation_id, property_id, guest_id, property_title, days_until)
    return enqueue(
        REMINDER_EVENT,
        {
            "reservationId": reservation_id,
            "propertyId": property_id,
            "guestId": guest_id,
            "propertyTitle": property_title,
            "daysUntil": days_until,
        },
        guest_id,
        available_at=send_at,
    )


def _send_welcome(dispatcher: NotificationDispatcher, payload: dict) -> DispatchResult:
    # The outbox already waited until available_at.
    return dispatcher.send_welcome(int(payload["userId"]), payload.get("firstName") or "", delay=0)


def _send_reminder(dispatcher: NotificationDispatcher, payload: dict) -> DispatchResult:
    return dispatcher.notify(
        ReservationReminder(
            reservation_id=int(payload["reservationId"]),
            property_id=int(payload["propertyId"]),
            guest_id=int(payload["guestId"]),
            property_title=payload.get("propertyTitle") or "",
            days_until=int(payload["daysUntil"]),
        )
    )


HANDLERS: Dict[str, Callable[[NotificationDispatcher, dict], DispatchResult]] = {
    WELCOME_EVENT: _send_welcome,
    REMINDER_EVENT: _send_reminder,
}


def handle_outbox_message(message: OutboxMessage, dispatcher: Optional[NotificationDispatcher] = None) -> None:
    """Send one outbox message.

    Recipient-side refusals and per-token failures are logged and the message
    counts as handled; resending would duplicate pushes on devices that
    already got them. Anything else propagates so the worker retries.
    """
    handler = HANDLERS.get(message.event_type)
    if handler is None:
        raise ValueError(f"no handler for outbox event {message.event_type}")

    dispatcher = dispatcher if dispatcher is not None else NotificationDispatcher()
    try:
        result = handler(dispatcher, dict(message.payload or {}))
    except (NotPermittedError, UserMissingError, CorruptTokensError) as exc:
        logger.info("Skipping %s for user %s: %s", message.event_type, message.user_id, exc)
        return
    if not result.ok:
        logger.warning(
            "%s for user %s reached %d of %d device(s); last error: %s",
            message.event_type,
            message.user_id,
            len(result.delivered),
            len(result.attempted),
            result.error,
        )
