import json

import pytest

from habitat.core.notifications.events import (
    ExperienceBooked,
    MessageReceived,
    PropertyStatusChanged,
    ReservationAccepted,
    ReservationCreated,
    ReservationRejected,
    ReservationReminder,
    VideoInteraction,
    Welcome,
    build_payload,
    custom_payload,
)
from habitat.core.notifications.templates import MESSAGES

pytestmark = pytest.mark.unit

ALL_EVENTS = [
    ReservationCreated(1, 2, 3, 4, "Mariem", "Villa Tevragh Zeina"),
    ReservationAccepted(1, 2, 4, 3, "Sidi", "Villa Tevragh Zeina"),
    ReservationRejected(1, 2, 4, 3, "Sidi", "Villa Tevragh Zeina"),
    MessageReceived(3, 4, "Mariem", "Villa Tevragh Zeina"),
    VideoInteraction(3, 4, "Mariem", "Coucher de soleil", "like", video_id=77),
    VideoInteraction(3, 4, "Mariem", "Coucher de soleil", "comment"),
    VideoInteraction(3, 4, "Mariem", "Coucher de soleil", "share"),
    ExperienceBooked(9, 3, 4, "Mariem", "Balade à dos de chameau"),
    PropertyStatusChanged(2, 3, "Villa Tevragh Zeina", "approved"),
    PropertyStatusChanged(2, 3, "Villa Tevragh Zeina", "rejected"),
    PropertyStatusChanged(2, 3, "Villa Tevragh Zeina", "under_review"),
    PropertyStatusChanged(2, 3, "Villa Tevragh Zeina", "archived"),
    ReservationReminder(1, 2, 4, "Villa Tevragh Zeina", 0),
    ReservationReminder(1, 2, 4, "Villa Tevragh Zeina", 1),
    ReservationReminder(1, 2, 4, "Villa Tevragh Zeina", 5),
    Welcome(4, "Mariem"),
]

RESERVED_KEYS = {"type", "id", "propertyId", "userId", "hostId", "screen", "params", "action"}


@pytest.mark.parametrize("event", ALL_EVENTS, ids=lambda e: type(e).__name__)
def test_every_event_carries_a_deep_link(event):
    payload = build_payload(event)
    data = payload.data
    assert data["type"]
    assert data["screen"]
    assert isinstance(json.loads(data["params"]), dict)
    assert set(data) <= RESERVED_KEYS
    assert all(isinstance(v, str) for v in data.values())
    assert payload.title and payload.body


def test_reservation_created_goes_to_host_with_guest_params():
    event = ALL_EVENTS[0]
    payload = build_payload(event)
    assert event.recipient_id == 3
    assert payload.title == "🏠 Nouvelle Réservation!"
    assert payload.body == "Mariem a fait une réservation pour Villa Tevragh Zeina"
    assert payload.data["screen"] == "HostReservations"
    assert payload.data["action"] == "view_reservation"
    assert payload.data["id"] == "1"
    assert payload.data["hostId"] == "3"
    assert json.loads(payload.data["params"]) == {"reservationId": 1, "propertyId": 2, "guestId": 4}


def test_reservation_decisions_go_to_guest():
    accepted = build_payload(ALL_EVENTS[1])
    rejected = build_payload(ALL_EVENTS[2])
    assert ALL_EVENTS[1].recipient_id == 4
    assert accepted.data["type"] == "reservation_accepted"
    assert rejected.data["type"] == "reservation_rejected"
    assert accepted.body == "Sidi a accepté votre réservation pour Villa Tevragh Zeina"
    assert rejected.title == "😔 Réservation Refusée"
    assert json.loads(accepted.data["params"]) == {"reservationId": 1, "propertyId": 2, "hostId": 3}
    assert accepted.data["screen"] == "MyReservations"


def test_message_params_escape_names_as_json():
    event = MessageReceived(3, 4, 'Ould "Le Grand"', "Villa")
    params = json.loads(build_payload(event).data["params"])
    assert params == {"senderId": 4, "senderName": 'Ould "Le Grand"'}


@pytest.mark.parametrize(
    "interaction, title",
    [("like", "❤️ Votre Vidéo a été Aimée!"), ("comment", "💬 Nouveau Commentaire!"), ("share", "📹 Interaction Vidéo")],
)
def test_video_type_and_title_follow_interaction(interaction, title):
    payload = build_payload(VideoInteraction(3, 4, "Mariem", "Dunes", interaction))
    assert payload.data["type"] == f"video_{interaction}"
    assert payload.title == title
    assert payload.data["action"] == "view_video"


def test_video_params_include_video_id_when_known():
    params = json.loads(build_payload(ALL_EVENTS[4]).data["params"])
    assert params["videoId"] == 77
    assert params["interactionType"] == "like"


@pytest.mark.parametrize(
    "status, title",
    [
        ("approved", "✅ Propriété Approuvée!"),
        ("rejected", "❌ Propriété Rejetée"),
        ("under_review", "🔍 Propriété en Révision"),
        ("archived", "🏠 Mise à Jour de Propriété"),
    ],
)
def test_property_status_titles(status, title):
    payload = build_payload(PropertyStatusChanged(2, 3, "Villa", status))
    assert payload.title == title
    assert json.loads(payload.data["params"]) == {"propertyId": 2, "status": status}
    assert payload.data["screen"] == "MyProperties"


def test_property_status_other_mentions_status():
    payload = build_payload(PropertyStatusChanged(2, 3, "Villa", "archived"))
    assert payload.body == "Le statut de votre propriété 'Villa' a été mis à jour: archived"


def test_reminder_wording_depends_on_days():
    tomorrow = build_payload(ReservationReminder(1, 2, 4, "Villa", 1))
    later = build_payload(ReservationReminder(1, 2, 4, "Villa", 5))
    assert tomorrow.title == "⏰ Rappel: Réservation Demain!"
    assert tomorrow.body == "N'oubliez pas votre séjour à Villa demain!"
    assert later.title == "📅 Rappel de Réservation"
    assert later.body == "Votre séjour à Villa commence dans 5 jours!"
    assert "action" not in later.data
    assert json.loads(later.data["params"])["daysUntil"] == 5


def test_reminder_rejects_negative_days():
    with pytest.raises(ValueError):
        ReservationReminder(1, 2, 4, "Villa", -1)


def test_welcome_has_no_action():
    payload = build_payload(Welcome(4, "Mariem"))
    assert payload.title == "🎉 Bienvenue sur habitat!"
    assert payload.body.startswith("Bonjour Mariem!")
    assert "action" not in payload.data
    assert payload.data["userId"] == "4"


def test_braces_in_titles_are_not_template_fields():
    payload = build_payload(ReservationCreated(1, 2, 3, 4, "{guest}", "Villa {x}"))
    assert payload.body == "{guest} a fait une réservation pour Villa {x}"


def test_custom_payload_has_empty_deep_link():
    payload = custom_payload(5, "Salut", "Test", "test")
    assert payload.data["type"] == "test"
    assert payload.data["params"] == "{}"
    assert payload.data["userId"] == "5"


def test_every_template_has_a_title():
    assert all(t.title for t in MESSAGES.values())
