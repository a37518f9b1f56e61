"""Append-only audit trail of admin-triggered changes."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from habitat.extensions import db


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    admin_user_id: Mapped[int] = mapped_column(nullable=False, index=True, default=0)
    action: Mapped[str] = mapped_column(db.String(64), index=True)
    resource_type: Mapped[str] = mapped_column(db.String(64), index=True)
    resource_id: Mapped[int] = mapped_column(index=True)
    before_json: Mapped[str] = mapped_column(db.Text, default="")
    after_json: Mapped[str] = mapped_column(db.Text, default="")
    ip_address: Mapped[str] = mapped_column(db.String(64), default="")
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
