"""Notification model module."""

from __future__ import annotations

from sqlalchemy import Boolean, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import AuditMixin, Base, IdMixin
from app.models.enums import NotificationType


class Notification(Base, IdMixin, AuditMixin):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notifications_recipient_read", "recipient_id", "is_read"),
        Index("idx_notifications_recipient_role", "recipient_role"),
    )

    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(Enum(NotificationType), nullable=False)
    recipient_id: Mapped[str | None] = mapped_column(String(36))
    recipient_role: Mapped[str | None] = mapped_column(String(20))
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
