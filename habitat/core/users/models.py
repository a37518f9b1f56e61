"""User model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from habitat.extensions import db

ROLE_USER = "user"
ROLE_HOST = "host"
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "super_admin"
ROLES = (ROLE_USER, ROLE_HOST, ROLE_ADMIN, ROLE_SUPER_ADMIN)
ADMIN_ROLES = frozenset({ROLE_ADMIN, ROLE_SUPER_ADMIN})


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)


class User(db.Model, TimestampMixin):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    first_name: Mapped[str | None] = mapped_column(db.String(120))
    last_name: Mapped[str | None] = mapped_column(db.String(120))
    phone_number: Mapped[str | None] = mapped_column(db.String(32))
    role: Mapped[str] = mapped_column(db.String(20), nullable=False, default=ROLE_USER, index=True)
    # None means the user was never asked; only True allows push delivery.
    allows_notifications: Mapped[bool | None] = mapped_column(nullable=True)
    # JSON-encoded list of device push tokens, as written by the mobile client.
    push_tokens: Mapped[str | None] = mapped_column(db.Text, nullable=True)
