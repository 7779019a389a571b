"""Background materialization of kanban cards after lead updates."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from app.database.db import get_db_session
from app.services.vendor_matching_service import VendorMatchingService
from app.tasks.celery_app import celery_app
from app.tasks.hooks import after_task, before_task

logger = logging.getLogger(__name__)

SYNC_TASK_NAME = "matching.sync_vendor_cards"


def run_card_sync(lead_id: str, team_ids_by_vendor: dict[str, list[str]], trace_id: str | None = None) -> dict[str, Any]:
    """Run one card sync in its own session and report a JSON-safe summary."""
    context = {"lead_id": lead_id, "trace_id": trace_id or uuid.uuid4().hex}
    logger.info("task.start", extra=before_task(SYNC_TASK_NAME, context))
    try:
        with get_db_session() as session:
            result = VendorMatchingService(session).create_or_update_cards(lead_id, team_ids_by_vendor)
    except Exception:
        logger.exception("task.failed", extra=after_task(SYNC_TASK_NAME, context, status="failed"))
        raise

    status = "succeeded" if result.ok else "partial"
    logger.info(
        "task.finish",
        extra=after_task(SYNC_TASK_NAME, context, status=status, failures=len(result.failures)),
    )
    return {
        "lead_id": lead_id,
        "status": status,
        "cards_created": result.cards_created,
        "links_created": result.links_created,
        "failures": result.failures,
    }


@celery_app.task(bind=True, name=SYNC_TASK_NAME)
def sync_vendor_cards(self, lead_id: str, team_ids_by_vendor: dict[str, list[str]]) -> dict[str, Any]:
    return run_card_sync(lead_id, team_ids_by_vendor, trace_id=self.request.id)


def dispatch_card_sync(lead_id: str, team_ids_by_vendor: dict[str, list[str]]) -> str | None:
    """Queue a card sync; broker failures are logged, never raised to the caller."""
    try:
        async_result = sync_vendor_cards.delay(lead_id, team_ids_by_vendor)
    except Exception as exc:
        logger.error(
            "matching.dispatch_failed",
            extra={"event": "matching.dispatch_failed", "lead_id": lead_id, "reason": str(exc)},
        )
        return None
    return async_result.id
