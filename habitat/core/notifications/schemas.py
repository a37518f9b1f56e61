"""Request bodies for notification endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class NotificationSettingsRequest(_CamelModel):
    allows_notifications: bool = Field(alias="allowsNotifications")


class TestPushRequest(_CamelModel):
    user_id: int = Field(alias="userId", gt=0)
    title: str = Field(min_length=1, max_length=200)
    body: str = Field(min_length=1, max_length=1000)
    type: str = "test"


class WelcomeRequest(_CamelModel):
    user_id: int = Field(alias="userId", gt=0)
