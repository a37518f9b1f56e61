"""Push gateways.

A gateway delivers one message to one device token and raises
``TransportError`` or ``InvalidDeviceTokenError`` on failure. The Expo
gateway talks to the Expo push API; the recording gateway keeps messages in
memory and is used in tests and when no gateway URL is configured.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Protocol

import requests
from flask import Flask, current_app

from habitat.core.errors import HabitatError, InvalidDeviceTokenError, TransportError

logger = logging.getLogger(__name__)

MEMORY_URL = "memory://"
DEVICE_NOT_REGISTERED = "DeviceNotRegistered"


def short_token(device_token: str) -> str:
    return device_token[:16] + "..." if len(device_token) > 16 else device_token


class PushGateway(Protocol):
    def send(self, device_token: str, title: str, body: str, data: Mapping[str, str]) -> None:
        ...


class ExpoPushGateway:
    """Send through the Expo push service over HTTPS."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        access_token: str = "",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.access_token = access_token
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def send(self, device_token: str, title: str, body: str, data: Mapping[str, str]) -> None:
        message = {
            "to": device_token,
            "title": title,
            "body": body,
            "data": dict(data),
            "sound": "default",
        }
        try:
            resp = self.session.post(self.url, json=message, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"push gateway unreachable: {exc}") from exc

        if resp.status_code >= 400:
            raise TransportError(f"push gateway returned {resp.status_code}")

        try:
            ticket = resp.json().get("data")
        except (ValueError, AttributeError) as exc:
            raise TransportError("push gateway returned an unreadable response") from exc
        if isinstance(ticket, list):
            ticket = ticket[0] if ticket else None
        if not isinstance(ticket, dict) or ticket.get("status") != "error":
            return

        details = ticket.get("details")
        message_text = str(ticket.get("message") or details or "push rejected")
        if isinstance(details, dict) and details.get("error") == DEVICE_NOT_REGISTERED:
            raise InvalidDeviceTokenError(device_token, message_text)
        raise TransportError(message_text)


@dataclass
class SentPush:
    device_token: str
    title: str
    body: str
    data: Dict[str, str]


class RecordingPushGateway:
    """In-memory gateway; ``fail_for`` maps a device token to the error to raise."""

    def __init__(self, fail_for: Optional[Dict[str, HabitatError]] = None) -> None:
        self.sent: List[SentPush] = []
        self.attempts: List[str] = []
        self.fail_for: Dict[str, HabitatError] = dict(fail_for or {})

    def send(self, device_token: str, title: str, body: str, data: Mapping[str, str]) -> None:
        self.attempts.append(device_token)
        error = self.fail_for.get(device_token)
        if error is not None:
            raise error
        self.sent.append(SentPush(device_token, title, body, dict(data)))
        logger.info("Recorded push to %s: %s", short_token(device_token), title)

    def clear(self) -> None:
        self.sent.clear()
        self.attempts.clear()
        self.fail_for.clear()


def build_push_gateway(url: str, timeout: float = 10.0, access_token: str = "") -> PushGateway:
    if not url or url.startswith(MEMORY_URL):
        return RecordingPushGateway()
    return ExpoPushGateway(url, timeout=timeout, access_token=access_token)


def init_push_gateway(app: Flask) -> None:
    gateway = build_push_gateway(
        app.config.get("PUSH_GATEWAY_URL", ""),
        timeout=app.config.get("PUSH_GATEWAY_TIMEOUT", 10.0),
        access_token=app.config.get("PUSH_GATEWAY_ACCESS_TOKEN", ""),
    )
    if isinstance(gateway, RecordingPushGateway):
        logger.info("No push gateway configured; pushes are recorded in memory")
    app.extensions["push_gateway"] = gateway


def get_push_gateway() -> PushGateway:
    return current_app.extensions["push_gateway"]
