"""Typed schemas for user IO."""

from __future__ import annotations

from typing import Literal, Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from habitat.core.utils import phone

if TYPE_CHECKING:
    from habitat.core.users.models import User


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    email: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    role: str
    allows_notifications: Optional[bool] = Field(default=None, alias="allowsNotifications")


class PushTokenRequest(BaseModel):
    op: Literal["add", "replace", "remove"]
    token: str = Field(min_length=1)

    @field_validator("token")
    @classmethod
    def strip_token(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("token must not be blank")
        return v


class NotificationConsentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    allows_notifications: Optional[bool] = Field(alias="allowsNotifications")


class RoleUpdateRequest(BaseModel):
    role: str


def serialize_user(user: "User") -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        phone_number=phone.display(user.phone_number) if user.phone_number else None,
        role=user.role,
        allows_notifications=user.allows_notifications,
    )
