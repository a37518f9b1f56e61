from __future__ import annotations

import json
from datetime import datetime, timedelta

import pytest

from habitat.core.notifications.dispatcher import NotificationDispatcher
from habitat.core.notifications.scheduling import (
    handle_outbox_message,
    schedule_reservation_reminder,
    schedule_welcome,
)
from habitat.extensions import db
from habitat.habitat_platform.outbox.models import OutboxMessage
from habitat.habitat_platform.worker import dispatcher
from habitat.habitat_platform.worker.config import DispatchConfig

pytestmark = pytest.mark.integration


def _config(**overrides) -> DispatchConfig:
    defaults = {
        "batch_size": 5,
        "poll_interval": 0,
        "max_attempts": 2,
        "backoff_seconds": 3,
        "backoff_multiplier": 2,
    }
    defaults.update(overrides)
    return DispatchConfig(**defaults)


def _enqueue(event_type: str = "test.event", available_at: datetime | None = None) -> OutboxMessage:
    msg = OutboxMessage(
        event_type=event_type,
        payload={"hello": "world"},
        status="pending",
        available_at=available_at or datetime.utcnow() - timedelta(seconds=1),
    )
    db.session.add(msg)
    db.session.commit()
    return msg


def test_successful_dispatch_marks_sent(app):
    msg = _enqueue()
    seen: list[int] = []

    processed = dispatcher.process_ready_batch(lambda m: seen.append(m.id), _config())

    db.session.refresh(msg)
    assert processed == 1
    assert seen == [msg.id]
    assert msg.status == "sent"
    assert msg.attempts == 1
    assert msg.sent_at is not None
    assert msg.last_error is None


def test_future_messages_wait(app):
    _enqueue(available_at=datetime.utcnow() + timedelta(minutes=5))
    assert dispatcher.process_ready_batch(lambda m: None, _config()) == 0


def test_failure_backs_off_then_gives_up(app):
    msg = _enqueue()
    cfg = _config(max_attempts=2, backoff_seconds=4, backoff_multiplier=2)

    def _send_fail(_):
        raise RuntimeError("boom")

    start = datetime.utcnow()
    dispatcher.process_ready_batch(_send_fail, cfg)
    db.session.refresh(msg)
    assert msg.attempts == 1
    assert msg.status == "retry"
    assert msg.available_at >= start + timedelta(seconds=4)
    assert msg.last_error == "boom"

    msg.available_at = datetime.utcnow() - timedelta(seconds=1)
    db.session.commit()

    dispatcher.process_ready_batch(_send_fail, cfg)
    db.session.refresh(msg)
    assert msg.attempts == 2
    assert msg.status == "failed"


def test_backoff_grows_geometrically():
    cfg = _config(backoff_seconds=5, backoff_multiplier=2)
    assert [cfg.backoff_for(n) for n in (1, 2, 3)] == [5, 10, 20]


def test_scheduled_welcome_is_sent_by_worker(app, make_user, gateway):
    user = make_user(first_name="Mariem", allows_notifications=True, push_tokens=json.dumps(["A"]))
    schedule_welcome(user.id, "Mariem", delay=0)
    db.session.commit()

    sent = dispatcher.process_ready_batch(handle_outbox_message, _config())

    assert sent == 1
    assert gateway.sent[0].data["type"] == "welcome"
    assert gateway.sent[0].body.startswith("Bonjour Mariem!")


def test_welcome_for_user_without_consent_is_dropped_not_retried(app, make_user, gateway):
    user = make_user(allows_notifications=False)
    message = schedule_welcome(user.id, "Sidi", delay=0)
    db.session.commit()

    dispatcher.process_ready_batch(handle_outbox_message, _config())

    db.session.refresh(message)
    assert message.status == "sent"
    assert gateway.attempts == []


def test_reminder_routes_to_guest(app, make_user, gateway):
    guest = make_user(allows_notifications=True, push_tokens=json.dumps(["G"]))
    schedule_reservation_reminder(10, 20, guest.id, "Villa", 1)
    db.session.commit()

    dispatcher.process_ready_batch(handle_outbox_message, _config())

    push = gateway.sent[0]
    assert push.title == "⏰ Rappel: Réservation Demain!"
    assert json.loads(push.data["params"]) == {"reservationId": 10, "propertyId": 20, "daysUntil": 1}


def test_reminder_rejects_negative_days(app):
    with pytest.raises(ValueError):
        schedule_reservation_reminder(10, 20, 1, "Villa", -2)
    assert OutboxMessage.query.count() == 0


def test_unknown_event_type_is_retried(app):
    msg = _enqueue(event_type="notifications.unknown")
    dispatcher.process_ready_batch(handle_outbox_message, _config())
    db.session.refresh(msg)
    assert msg.status == "retry"
    assert "no handler" in msg.last_error


def test_handler_uses_given_dispatcher(app, make_user):
    from habitat.core.notifications.gateway import RecordingPushGateway

    user = make_user(allows_notifications=True, push_tokens=json.dumps(["A"]))
    message = schedule_welcome(user.id, "Mariem", delay=0)
    own_gateway = RecordingPushGateway()
    handle_outbox_message(message, NotificationDispatcher(gateway=own_gateway, welcome_delay=0))
    assert own_gateway.attempts == ["A"]
