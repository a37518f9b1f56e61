"""Outbox dispatch loop: claim ready messages, hand them to a sender, record outcomes."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from habitat.extensions import db
from habitat.habitat_platform.outbox.models import OutboxMessage
from habitat.habitat_platform.outbox.services import (
    READY_STATUSES,
    STATUS_FAILED,
    STATUS_RETRY,
    STATUS_SENDING,
    STATUS_SENT,
)
from habitat.habitat_platform.worker.config import DispatchConfig

logger = logging.getLogger(__name__)

Sender = Callable[[OutboxMessage], None]


def claim_ready_messages(session: Session, batch_size: int) -> List[OutboxMessage]:
    """Reserve up to ``batch_size`` due messages by moving them to ``sending``.

    ``SKIP LOCKED`` lets several workers poll the same table; backends without
    row locks (SQLite) ignore it.
    """
    now = datetime.utcnow()
    ready = (
        session.query(OutboxMessage)
        .filter(OutboxMessage.available_at <= now, OutboxMessage.status.in_(READY_STATUSES))
        .order_by(OutboxMessage.available_at, OutboxMessage.id)
        .with_for_update(skip_locked=True)
        .limit(batch_size)
        .all()
    )
    for message in ready:
        message.status = STATUS_SENDING
        message.attempts = (message.attempts or 0) + 1
    session.flush()
    return ready


def _record_failure(message: OutboxMessage, err: Exception, config: DispatchConfig) -> None:
    message.last_error = str(err) or err.__class__.__name__
    if message.attempts >= config.max_attempts:
        message.status = STATUS_FAILED
        logger.error("Outbox message %s (%s) failed permanently: %s", message.id, message.event_type, err)
        return
    retry_at = datetime.utcnow() + timedelta(seconds=config.backoff_for(message.attempts))
    message.available_at = max(message.available_at or retry_at, retry_at)
    message.status = STATUS_RETRY
    logger.warning(
        "Outbox message %s (%s) attempt %d failed, retrying at %s: %s",
        message.id,
        message.event_type,
        message.attempts,
        retry_at.isoformat(),
        err,
    )


def process_ready_batch(send: Sender, config: DispatchConfig, session: Optional[Session] = None) -> int:
    """Claim one batch and send it. Returns the number of messages sent."""
    session = session if session is not None else db.session
    messages = claim_ready_messages(session, config.batch_size)
    session.commit()

    sent = 0
    for message in messages:
        try:
            send(message)
        except Exception as err:  # any sender failure is retried with backoff
            session.rollback()
            _record_failure(message, err, config)
        else:
            message.status = STATUS_SENT
            message.last_error = None
            message.sent_at = datetime.utcnow()
            sent += 1
        session.commit()
    return sent


def run_dispatcher(config: DispatchConfig, send: Optional[Sender] = None, max_loops: Optional[int] = None) -> None:
    """Poll forever (or ``max_loops`` times), sleeping when the outbox is idle."""
    if send is None:
        from habitat.core.notifications.scheduling import handle_outbox_message

        send = handle_outbox_message

    loops = 0
    logger.info("Outbox worker started (batch=%d, poll=%.1fs)", config.batch_size, config.poll_interval)
    while max_loops is None or loops < max_loops:
        loops += 1
        sent = process_ready_batch(send, config)
        if not sent:
            time.sleep(config.poll_interval)
