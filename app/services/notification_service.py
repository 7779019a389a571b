"""Notification persistence and admin/owner fan-out."""

from __future__ import annotations

import logging

from app.models.enums import NotificationType, UserRole
from app.models.notification import Notification
from app.models.user import User
from app.services.base_service import BaseService

logger = logging.getLogger(__name__)


class NotificationService(BaseService):
    """Service for notification rows addressed to users or roles."""

    def send_notification(
        self,
        message: str,
        notification_type: NotificationType,
        recipient_id: str | None = None,
        recipient_role: str | None = None,
    ) -> Notification:
        row = Notification(
            message=message,
            type=notification_type,
            recipient_id=recipient_id,
            recipient_role=recipient_role,
        )
        self.db.add(row)
        self.commit()
        self.db.refresh(row)
        return row

    def admin_ids(self) -> list[str]:
        """Active admin ids, queried fresh on every call."""
        rows = (
            self.db.query(User.id)
            .filter(User.role == UserRole.ADMIN, User.is_active.is_(True))
            .order_by(User.created_at)
            .all()
        )
        return [row.id for row in rows]

    def notify_admins_and_owner(
        self,
        message: str,
        notification_type: NotificationType,
        owner_id: str | None = None,
    ) -> int:
        """Write one notification per admin plus the lead owner; returns rows written."""
        recipients: list[tuple[str, str]] = [(admin_id, UserRole.ADMIN.value) for admin_id in self.admin_ids()]
        if owner_id and owner_id not in {recipient for recipient, _ in recipients}:
            recipients.append((owner_id, UserRole.USER.value))

        for recipient_id, role in recipients:
            self.db.add(
                Notification(
                    message=message,
                    type=notification_type,
                    recipient_id=recipient_id,
                    recipient_role=role,
                )
            )
        self.commit()
        logger.info(
            "notification.fan_out",
            extra={
                "event": "notification.fan_out",
                "notification_type": notification_type.value,
                "recipients": len(recipients),
            },
        )
        return len(recipients)

    def list_for_recipient(
        self,
        recipient_id: str,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[Notification]:
        query = self.db.query(Notification).filter(Notification.recipient_id == recipient_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return query.order_by(Notification.created_at.desc()).limit(limit).all()
