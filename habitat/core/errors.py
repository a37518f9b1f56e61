"""Error kinds shared by services and controllers.

Services raise these; the app-level error handler renders them as
``{"ok": false, "error": <code>, "message": <text>}`` with the status from
``status_for``.
"""

from __future__ import annotations

from typing import Dict


class HabitatError(Exception):
    code = "internal"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)


class NotFoundError(HabitatError):
    code = "not_found"


class UserMissingError(NotFoundError):
    """Recipient of a notification does not exist."""

    code = "user_missing"


class ForbiddenError(HabitatError):
    code = "forbidden"


class InvalidCredentialsError(HabitatError):
    """A presented token failed signature or expiry checks."""

    code = "unauthorized"


class NotPermittedError(HabitatError):
    """Recipient has not consented to push, or has no device tokens."""

    code = "not_permitted"


class CorruptTokensError(HabitatError):
    code = "corrupt_tokens"


class TransportError(HabitatError):
    code = "transport"


class InvalidDeviceTokenError(HabitatError):
    """The push gateway rejected one specific device token."""

    code = "invalid_token"

    def __init__(self, device_token: str, message: str = "") -> None:
        super().__init__(message or "device token rejected by gateway")
        self.device_token = device_token


class InternalError(HabitatError):
    code = "internal"


_STATUS_BY_CODE: Dict[str, int] = {
    NotFoundError.code: 404,
    UserMissingError.code: 404,
    ForbiddenError.code: 403,
    InvalidCredentialsError.code: 401,
    NotPermittedError.code: 409,
    CorruptTokensError.code: 500,
    TransportError.code: 502,
    InvalidDeviceTokenError.code: 502,
    InternalError.code: 500,
}


def status_for(error: HabitatError) -> int:
    return _STATUS_BY_CODE.get(error.code, 500)


__all__ = [
    "HabitatError",
    "NotFoundError",
    "UserMissingError",
    "ForbiddenError",
    "InvalidCredentialsError",
    "NotPermittedError",
    "CorruptTokensError",
    "TransportError",
    "InvalidDeviceTokenError",
    "InternalError",
    "status_for",
]
