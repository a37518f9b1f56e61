"""Push notifications: events, templates, gateways and the fan-out dispatcher."""

from habitat.core.notifications.dispatcher import DispatchResult, NotificationDispatcher
from habitat.core.notifications.events import (
    ExperienceBooked,
    MessageReceived,
    NotificationEvent,
    NotificationPayload,
    PropertyStatusChanged,
    ReservationAccepted,
    ReservationCreated,
    ReservationRejected,
    ReservationReminder,
    VideoInteraction,
    Welcome,
    build_payload,
)
from habitat.core.notifications.gateway import ExpoPushGateway, PushGateway, RecordingPushGateway

__all__ = [
    "DispatchResult",
    "NotificationDispatcher",
    "NotificationEvent",
    "NotificationPayload",
    "build_payload",
    "ExperienceBooked",
    "MessageReceived",
    "PropertyStatusChanged",
    "ReservationAccepted",
    "ReservationCreated",
    "ReservationRejected",
    "ReservationReminder",
    "VideoInteraction",
    "Welcome",
    "ExpoPushGateway",
    "PushGateway",
    "RecordingPushGateway",
]
