"""Listing model (only the columns the location and moderation flows read)."""

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column

from habitat.core.users.models import TimestampMixin
from habitat.extensions import db

STATUS_UNDER_REVIEW = "under_review"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"


class Property(db.Model, TimestampMixin):
    __tablename__ = "property"

    id: Mapped[int] = mapped_column(primary_key=True)
    host_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(db.String(255), nullable=False)
    lat: Mapped[float] = mapped_column(nullable=False)
    lng: Mapped[float] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(db.String(32), nullable=False, default=STATUS_UNDER_REVIEW)
    review_notes: Mapped[str | None] = mapped_column(db.Text)
    is_active: Mapped[bool] = mapped_column(default=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "hostId": self.host_id,
            "title": self.title,
            "lat": self.lat,
            "lng": self.lng,
            "status": self.status,
            "reviewNotes": self.review_notes,
            "isActive": self.is_active,
        }
