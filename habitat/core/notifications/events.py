"""Notification events and the payloads they render to.

Each event knows its recipient, its message template and the deep link the
mobile client follows when the notification is opened. ``build_payload``
turns an event into the ``(title, body, data)`` triple sent to every device.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional

from habitat.core.notifications import templates

PROPERTY_STATUS_TEMPLATES = {
    "approved": "property_approved",
    "rejected": "property_rejected",
    "under_review": "property_under_review",
}
VIDEO_TEMPLATES = {"like": "video_like", "comment": "video_comment"}


@dataclass(frozen=True)
class NotificationPayload:
    title: str
    body: str
    data: Dict[str, str] = field(default_factory=dict)


def _id(value: Optional[int]) -> str:
    return "" if value is None else str(value)


class NotificationEvent:
    """Base for every event variant.

    Subclasses set ``type``, ``screen`` and ``action`` and implement
    ``recipient_id``, ``render`` and ``params``. ``ids`` fills the flat
    ``id``/``propertyId``/``userId``/``hostId`` keys older clients read.
    """

    type: ClassVar[str] = ""
    screen: ClassVar[str] = ""
    action: ClassVar[Optional[str]] = None

    @property
    def recipient_id(self) -> int:
        raise NotImplementedError

    @property
    def data_type(self) -> str:
        return self.type

    def render(self) -> tuple[str, str]:
        raise NotImplementedError

    def params(self) -> Dict[str, Any]:
        raise NotImplementedError

    def ids(self) -> Dict[str, Optional[int]]:
        return {}


@dataclass(frozen=True)
class ReservationCreated(NotificationEvent):
    reservation_id: int
    property_id: int
    host_id: int
    guest_id: int
    guest_name: str
    property_title: str

    type: ClassVar[str] = "reservation_created"
    screen: ClassVar[str] = "HostReservations"
    action: ClassVar[Optional[str]] = "view_reservation"

    @property
    def recipient_id(self) -> int:
        return self.host_id

    def render(self):
        return templates.render(self.type, guest=self.guest_name, property=self.property_title)

    def params(self):
        return {"reservationId": self.reservation_id, "propertyId": self.property_id, "guestId": self.guest_id}

    def ids(self):
        return {"id": self.reservation_id, "propertyId": self.property_id, "userId": self.guest_id, "hostId": self.host_id}


@dataclass(frozen=True)
class _ReservationDecision(NotificationEvent):
    reservation_id: int
    property_id: int
    guest_id: int
    host_id: int
    host_name: str
    property_title: str

    screen: ClassVar[str] = "MyReservations"
    action: ClassVar[Optional[str]] = "view_reservation"

    @property
    def recipient_id(self) -> int:
        return self.guest_id

    def render(self):
        return templates.render(self.type, host=self.host_name, property=self.property_title)

    def params(self):
        return {"reservationId": self.reservation_id, "propertyId": self.property_id, "hostId": self.host_id}

    def ids(self):
        return {"id": self.reservation_id, "propertyId": self.property_id, "userId": self.guest_id, "hostId": self.host_id}


@dataclass(frozen=True)
class ReservationAccepted(_ReservationDecision):
    type: ClassVar[str] = "reservation_accepted"


@dataclass(frozen=True)
class ReservationRejected(_ReservationDecision):
    type: ClassVar[str] = "reservation_rejected"


@dataclass(frozen=True)
class MessageReceived(NotificationEvent):
    host_id: int
    sender_id: int
    sender_name: str
    property_title: str

    type: ClassVar[str] = "message_received"
    screen: ClassVar[str] = "Messages"
    action: ClassVar[Optional[str]] = "view_conversation"

    @property
    def recipient_id(self) -> int:
        return self.host_id

    def render(self):
        return templates.render(self.type, sender=self.sender_name, property=self.property_title)

    def params(self):
        return {"senderId": self.sender_id, "senderName": self.sender_name}

    def ids(self):
        return {"userId": self.sender_id, "hostId": self.host_id}


@dataclass(frozen=True)
class VideoInteraction(NotificationEvent):
    """Like, comment or any other reaction to a host's video."""

    host_id: int
    user_id: int
    user_name: str
    video_title: str
    interaction_type: str
    video_id: Optional[int] = None

    type: ClassVar[str] = "video"
    screen: ClassVar[str] = "VideoFeed"
    action: ClassVar[Optional[str]] = "view_video"

    @property
    def recipient_id(self) -> int:
        return self.host_id

    @property
    def data_type(self) -> str:
        return f"video_{self.interaction_type}"

    def render(self):
        key = VIDEO_TEMPLATES.get(self.interaction_type, "video_other")
        return templates.render(key, user=self.user_name, videoTitle=self.video_title)

    def params(self):
        params: Dict[str, Any] = {
            "userId": self.user_id,
            "userName": self.user_name,
            "interactionType": self.interaction_type,
        }
        if self.video_id is not None:
            params["videoId"] = self.video_id
        return params

    def ids(self):
        return {"id": self.video_id, "userId": self.user_id, "hostId": self.host_id}


@dataclass(frozen=True)
class ExperienceBooked(NotificationEvent):
    experience_id: int
    host_id: int
    guest_id: int
    guest_name: str
    experience_title: str

    type: ClassVar[str] = "experience_booked"
    screen: ClassVar[str] = "ExperienceBookings"
    action: ClassVar[Optional[str]] = "view_booking"

    @property
    def recipient_id(self) -> int:
        return self.host_id

    def render(self):
        return templates.render(self.type, guest=self.guest_name, title=self.experience_title)

    def params(self):
        return {"experienceId": self.experience_id, "guestId": self.guest_id, "guestName": self.guest_name}

    def ids(self):
        return {"id": self.experience_id, "userId": self.guest_id, "hostId": self.host_id}


@dataclass(frozen=True)
class PropertyStatusChanged(NotificationEvent):
    property_id: int
    host_id: int
    property_title: str
    status: str

    type: ClassVar[str] = "property_status_changed"
    screen: ClassVar[str] = "MyProperties"
    action: ClassVar[Optional[str]] = "view_property"

    @property
    def recipient_id(self) -> int:
        return self.host_id

    def render(self):
        key = PROPERTY_STATUS_TEMPLATES.get(self.status, "property_other")
        return templates.render(key, title=self.property_title, status=self.status)

    def params(self):
        return {"propertyId": self.property_id, "status": self.status}

    def ids(self):
        return {"id": self.property_id, "propertyId": self.property_id, "hostId": self.host_id}


@dataclass(frozen=True)
class ReservationReminder(NotificationEvent):
    reservation_id: int
    property_id: int
    guest_id: int
    property_title: str
    days_until: int

    type: ClassVar[str] = "reservation_reminder"
    screen: ClassVar[str] = "MyReservations"

    def __post_init__(self):
        if self.days_until < 0:
            raise ValueError("days_until must be non-negative")

    @property
    def recipient_id(self) -> int:
        return self.guest_id

    def render(self):
        if self.days_until == 1:
            return templates.render("reservation_reminder_tomorrow", title=self.property_title)
        return templates.render("reservation_reminder", title=self.property_title, days=self.days_until)

    def params(self):
        return {"reservationId": self.reservation_id, "propertyId": self.property_id, "daysUntil": self.days_until}

    def ids(self):
        return {"id": self.reservation_id, "propertyId": self.property_id, "userId": self.guest_id}


@dataclass(frozen=True)
class Welcome(NotificationEvent):
    user_id: int
    first_name: str

    type: ClassVar[str] = "welcome"
    screen: ClassVar[str] = "Home"

    @property
    def recipient_id(self) -> int:
        return self.user_id

    def render(self):
        return templates.render(self.type, firstName=self.first_name)

    def params(self):
        return {"userId": self.user_id}

    def ids(self):
        return {"userId": self.user_id}


def build_payload(event: NotificationEvent) -> NotificationPayload:
    title, body = event.render()
    ids = event.ids()
    data = {
        "type": event.data_type,
        "id": _id(ids.get("id")),
        "propertyId": _id(ids.get("propertyId")),
        "userId": _id(ids.get("userId")),
        "hostId": _id(ids.get("hostId")),
        "screen": event.screen,
        "params": json.dumps(event.params(), ensure_ascii=False),
    }
    if event.action:
        data["action"] = event.action
    return NotificationPayload(title=title, body=body, data=data)


def custom_payload(user_id: int, title: str, body: str, type: str = "custom") -> NotificationPayload:
    """Ad-hoc message (admin test pushes); opens the app without a deep link."""
    data = {
        "type": type or "custom",
        "id": "",
        "propertyId": "",
        "userId": str(user_id),
        "hostId": "",
        "screen": "",
        "params": "{}",
    }
    return NotificationPayload(title=title, body=body, data=data)
