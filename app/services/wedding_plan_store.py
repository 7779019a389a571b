"""Wedding-plan access used by lead updates and proposal acceptance."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from app.core.exceptions import ValidationError
from app.models.enums import PlanServiceStatus
from app.models.wedding_plan import WeddingEvent, WeddingPlan, WeddingPlanService
from app.services.base_service import BaseService

ACCEPTABLE_PLAN_STATUSES = (PlanServiceStatus.PENDING, PlanServiceStatus.ASSIGNED)


def _event_date(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(f"Invalid event date: {value}") from exc


class WeddingPlanStore(BaseService):
    """Reads and mutates a lead's wedding plan inside the caller's unit of work.

    Nothing here commits; the owning service decides when the transaction ends.
    """

    def get_for_lead(self, lead_id: str) -> WeddingPlan | None:
        return self.db.query(WeddingPlan).filter(WeddingPlan.lead_id == lead_id).first()

    def event_snapshot(self, lead_id: str) -> list[dict[str, Any]]:
        """Flatten the plan's events into JSON-ready records."""
        plan = self.get_for_lead(lead_id)
        if plan is None:
            return []
        return [
            {
                "name": item.name,
                "dateISO": item.date.isoformat() if item.date else None,
                "startTime": item.start_time,
                "endTime": item.end_time,
            }
            for item in plan.events
        ]

    def accept_services(self, lead_id: str) -> set[str]:
        """Flip PENDING/ASSIGNED plan services to ACCEPTED; return their vendor-service ids."""
        plan = self.get_for_lead(lead_id)
        if plan is None:
            return set()

        accepted: set[str] = set()
        rows = (
            self.db.query(WeddingPlanService)
            .filter(
                WeddingPlanService.wedding_plan_id == plan.id,
                WeddingPlanService.status.in_(ACCEPTABLE_PLAN_STATUSES),
            )
            .all()
        )
        for row in rows:
            row.status = PlanServiceStatus.ACCEPTED
            if row.vendor_service_id:
                accepted.add(row.vendor_service_id)
        self.db.flush()
        return accepted

    def upsert_plan(self, lead_id: str, user_id: str | None, payload: dict[str, Any]) -> WeddingPlan:
        """Create or update the plan; events/services with an id are updated, others created."""
        plan = self.get_for_lead(lead_id)
        if plan is None:
            plan = WeddingPlan(lead_id=lead_id, user_id=user_id)
            self.db.add(plan)
            self.db.flush()
        elif user_id:
            plan.user_id = user_id

        for field in ("total_budget", "guests"):
            if payload.get(field) is not None:
                setattr(plan, field, payload[field])

        events_by_id = {item.id: item for item in plan.events}
        for item in payload.get("events") or []:
            existing = events_by_id.get(item.get("id") or "")
            target = existing or WeddingEvent(wedding_plan_id=plan.id)
            target.name = item["name"]
            target.date = _event_date(item.get("date"))
            target.start_time = item.get("start_time")
            target.end_time = item.get("end_time")
            if existing is None:
                plan.events.append(target)

        services_by_id = {item.id: item for item in plan.services}
        for item in payload.get("services") or []:
            existing = services_by_id.get(item.get("id") or "")
            if existing is None and not item.get("vendor_service_id"):
                raise ValidationError("vendor_service_id is required for new plan services")
            target = existing or WeddingPlanService(wedding_plan_id=plan.id)
            target.quantity = item.get("quantity") or 1
            target.notes = item.get("notes")
            if item.get("vendor_service_id"):
                target.vendor_service_id = item["vendor_service_id"]
            if existing is None:
                plan.services.append(target)

        self.db.flush()
        return plan
