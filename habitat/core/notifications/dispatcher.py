"""Notification fan-out.

``NotificationDispatcher.notify(event)`` renders the event, resolves the
recipient's device tokens through the consent gate and sends to every token
in stored order. A failing token is logged and recorded; the remaining tokens
are still attempted. Consent and token-list errors are raised before any
send is attempted.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from flask import current_app

from habitat.core.errors import HabitatError, InvalidDeviceTokenError, TransportError
from habitat.core.notifications.events import NotificationEvent, NotificationPayload, Welcome, build_payload
from habitat.core.notifications.gateway import PushGateway, get_push_gateway, short_token
from habitat.core.notifications.registry import PushTokenRegistry, UserPushTokenRegistry

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    user_id: int
    attempted: List[str] = field(default_factory=list)
    failures: List[Tuple[str, HabitatError]] = field(default_factory=list)
    cancelled: bool = False

    @property
    def error(self) -> Optional[HabitatError]:
        """Last per-token error, ``None`` when every attempt succeeded."""
        return self.failures[-1][1] if self.failures else None

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def delivered(self) -> List[str]:
        failed = {token for token, _ in self.failures}
        return [t for t in self.attempted if t not in failed]

    @property
    def invalid_tokens(self) -> List[str]:
        return [token for token, err in self.failures if isinstance(err, InvalidDeviceTokenError)]

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class NotificationDispatcher:
    def __init__(
        self,
        gateway: Optional[PushGateway] = None,
        registry: Optional[PushTokenRegistry] = None,
        sleep: Callable[[float], None] = time.sleep,
        welcome_delay: Optional[float] = None,
    ) -> None:
        self.gateway = gateway if gateway is not None else get_push_gateway()
        self.registry = registry if registry is not None else UserPushTokenRegistry()
        self._sleep = sleep
        if welcome_delay is None:
            welcome_delay = float(current_app.config.get("WELCOME_NOTIFICATION_DELAY_SECONDS", 2.0))
        self.welcome_delay = welcome_delay

    def send_to_user(
        self,
        user_id: int,
        payload: NotificationPayload,
        cancel: Optional[threading.Event] = None,
    ) -> DispatchResult:
        tokens = self.registry.tokens_for(user_id)
        result = DispatchResult(user_id=user_id)
        for token in tokens:
            if cancel is not None and cancel.is_set():
                result.cancelled = True
                logger.info("Dispatch to user %s cancelled after %d of %d tokens", user_id, len(result.attempted), len(tokens))
                break
            result.attempted.append(token)
            try:
                self.gateway.send(token, payload.title, payload.body, payload.data)
            except (TransportError, InvalidDeviceTokenError) as exc:
                logger.warning(
                    "Push %s to user %s failed for token %s: %s",
                    payload.data.get("type", ""),
                    user_id,
                    short_token(token),
                    exc,
                )
                result.failures.append((token, exc))
        if result.ok:
            logger.info("Push %s delivered to %d device(s) of user %s", payload.data.get("type", ""), len(result.attempted), user_id)
        return result

    def notify(self, event: NotificationEvent, cancel: Optional[threading.Event] = None) -> DispatchResult:
        return self.send_to_user(event.recipient_id, build_payload(event), cancel=cancel)

    def send_welcome(self, user_id: int, first_name: str, delay: Optional[float] = None) -> DispatchResult:
        """Wait ``delay`` seconds so the first token registration can land, then greet."""
        delay = self.welcome_delay if delay is None else delay
        if delay > 0:
            self._sleep(delay)
        return self.notify(Welcome(user_id=user_id, first_name=first_name))
