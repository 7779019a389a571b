"""Notification inbox routes."""

from __future__ import annotations

from fastapi import APIRouter, Header, Query

from app.api.v1._authz import authorize_request
from app.database.db import get_db_session
from app.schemas.notifications import NotificationResponse
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
def list_notifications(
    unread_only: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> list[NotificationResponse]:
    user = authorize_request(authorization, scopes=["notifications.read"])
    with get_db_session() as db:
        rows = NotificationService(db).list_for_recipient(user.user_id, unread_only=unread_only, limit=limit)
        return [NotificationResponse.model_validate(row) for row in rows]
