"""Background fan-out of proposal lifecycle notifications."""

from __future__ import annotations

import logging
import uuid

from app.database.db import get_db_session
from app.models.enums import NotificationType
from app.services.notification_service import NotificationService
from app.tasks.celery_app import celery_app
from app.tasks.hooks import after_task, before_task

logger = logging.getLogger(__name__)

FAN_OUT_TASK_NAME = "notifications.fan_out"


def run_fan_out(message: str, notification_type: str, owner_id: str | None, trace_id: str | None = None) -> int:
    context = {"actor_id": owner_id, "trace_id": trace_id or uuid.uuid4().hex}
    logger.info("task.start", extra=before_task(FAN_OUT_TASK_NAME, context))
    with get_db_session() as session:
        written = NotificationService(session).notify_admins_and_owner(
            message, NotificationType(notification_type), owner_id
        )
    logger.info("task.finish", extra=after_task(FAN_OUT_TASK_NAME, context, status="succeeded", recipients=written))
    return written


@celery_app.task(bind=True, name=FAN_OUT_TASK_NAME)
def fan_out_notification(self, message: str, notification_type: str, owner_id: str | None = None) -> int:
    return run_fan_out(message, notification_type, owner_id, trace_id=self.request.id)


def dispatch_fan_out(message: str, notification_type: NotificationType, owner_id: str | None = None) -> str | None:
    """Queue a notification fan-out; broker failures are logged, never raised."""
    try:
        async_result = fan_out_notification.delay(message, notification_type.value, owner_id)
    except Exception as exc:
        logger.error(
            "notification.dispatch_failed",
            extra={
                "event": "notification.dispatch_failed",
                "notification_type": notification_type.value,
                "reason": str(exc),
            },
        )
        return None
    return async_result.id
