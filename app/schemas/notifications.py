"""Notification response schema."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.models.enums import NotificationType


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    message: str
    type: NotificationType
    recipient_id: str | None = None
    recipient_role: str | None = None
    is_read: bool
    created_at: datetime
