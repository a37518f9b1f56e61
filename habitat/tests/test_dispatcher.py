import json
import threading

import pytest

from habitat.core.errors import (
    CorruptTokensError,
    InvalidDeviceTokenError,
    NotPermittedError,
    TransportError,
    UserMissingError,
)
from habitat.core.notifications.dispatcher import NotificationDispatcher
from habitat.core.notifications.events import PropertyStatusChanged, ReservationCreated
from habitat.core.notifications.gateway import RecordingPushGateway
from habitat.core.notifications.registry import UserPushTokenRegistry


class StaticRegistry:
    def __init__(self, tokens):
        self.tokens = tokens

    def tokens_for(self, user_id):
        return list(self.tokens)


def _reservation(host_id=9):
    return ReservationCreated(
        reservation_id=100,
        property_id=200,
        host_id=host_id,
        guest_id=300,
        guest_name="Mariem",
        property_title="Villa",
    )


@pytest.mark.unit
def test_fan_out_attempts_every_token_and_returns_last_error():
    gateway = RecordingPushGateway(fail_for={"B": TransportError("timeout")})
    dispatcher = NotificationDispatcher(gateway=gateway, registry=StaticRegistry(["A", "B", "C"]), welcome_delay=0)

    result = dispatcher.notify(_reservation())

    assert gateway.attempts == ["A", "B", "C"]
    assert [p.device_token for p in gateway.sent] == ["A", "C"]
    assert isinstance(result.error, TransportError)
    assert result.delivered == ["A", "C"]
    assert not result.ok
    with pytest.raises(TransportError):
        result.raise_for_error()


@pytest.mark.unit
def test_last_failure_wins_and_invalid_tokens_are_collected():
    gateway = RecordingPushGateway(
        fail_for={
            "A": TransportError("timeout"),
            "C": InvalidDeviceTokenError("C", "DeviceNotRegistered"),
        }
    )
    dispatcher = NotificationDispatcher(gateway=gateway, registry=StaticRegistry(["A", "B", "C"]), welcome_delay=0)

    result = dispatcher.notify(_reservation())

    assert isinstance(result.error, InvalidDeviceTokenError)
    assert [token for token, _ in result.failures] == ["A", "C"]
    assert result.invalid_tokens == ["C"]


@pytest.mark.unit
def test_all_tokens_succeed():
    gateway = RecordingPushGateway()
    dispatcher = NotificationDispatcher(gateway=gateway, registry=StaticRegistry(["A", "B"]), welcome_delay=0)

    result = dispatcher.notify(_reservation())

    assert result.ok
    assert result.error is None
    result.raise_for_error()
    sent = gateway.sent[0]
    assert sent.title == "🏠 Nouvelle Réservation!"
    assert sent.data["screen"] == "HostReservations"
    assert json.loads(sent.data["params"])["reservationId"] == 100


@pytest.mark.unit
def test_cancellation_stops_remaining_tokens():
    cancel = threading.Event()

    class CancellingGateway(RecordingPushGateway):
        def send(self, device_token, title, body, data):
            super().send(device_token, title, body, data)
            cancel.set()

    gateway = CancellingGateway()
    dispatcher = NotificationDispatcher(gateway=gateway, registry=StaticRegistry(["A", "B"]), welcome_delay=0)

    result = dispatcher.notify(_reservation(), cancel=cancel)

    assert result.cancelled
    assert gateway.attempts == ["A"]
    assert result.ok


@pytest.mark.unit
def test_welcome_waits_for_configured_delay_then_sends():
    sleeps = []
    gateway = RecordingPushGateway()
    dispatcher = NotificationDispatcher(
        gateway=gateway,
        registry=StaticRegistry(["A"]),
        sleep=sleeps.append,
        welcome_delay=2.0,
    )

    result = dispatcher.send_welcome(4, "Mariem")

    assert sleeps == [2.0]
    assert result.ok
    assert gateway.sent[0].data["type"] == "welcome"

    dispatcher.send_welcome(4, "Mariem", delay=0)
    assert sleeps == [2.0]


@pytest.mark.integration
def test_no_consent_short_circuits_before_gateway(app, make_user, gateway):
    host = make_user(allows_notifications=False, push_tokens=json.dumps(["A"]))
    with pytest.raises(NotPermittedError):
        NotificationDispatcher().notify(_reservation(host_id=host.id))
    assert gateway.attempts == []


@pytest.mark.integration
@pytest.mark.parametrize(
    "consent, tokens",
    [(None, json.dumps(["A"])), (True, None), (True, "[]")],
)
def test_unset_consent_or_missing_tokens_is_not_permitted(app, make_user, gateway, consent, tokens):
    user = make_user(allows_notifications=consent, push_tokens=tokens)
    with pytest.raises(NotPermittedError):
        UserPushTokenRegistry().tokens_for(user.id)


@pytest.mark.integration
@pytest.mark.parametrize("blob", ["not json", '{"a": 1}', "[1, 2]"])
def test_corrupt_token_blob(app, make_user, blob):
    user = make_user(allows_notifications=True, push_tokens=blob)
    with pytest.raises(CorruptTokensError):
        UserPushTokenRegistry().tokens_for(user.id)


@pytest.mark.integration
def test_unknown_recipient(app):
    with pytest.raises(UserMissingError):
        NotificationDispatcher().notify(_reservation(host_id=999999))


@pytest.mark.integration
def test_dispatch_from_stored_tokens(app, make_user, gateway):
    host = make_user(allows_notifications=True, push_tokens=json.dumps(["ExponentPushToken[a]", "ExponentPushToken[b]"]))
    result = NotificationDispatcher().notify(PropertyStatusChanged(1, host.id, "Villa", "approved"))
    assert result.ok
    assert gateway.attempts == ["ExponentPushToken[a]", "ExponentPushToken[b]"]
    assert gateway.sent[0].title == "✅ Propriété Approuvée!"
