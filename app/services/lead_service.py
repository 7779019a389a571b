"""Lead service: intake, listing, updates and status maintenance."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import selectinload

from app.core.config import get_config
from app.core.exceptions import NotFoundError, ValidationError
from app.models.base import utcnow
from app.models.enums import LeadStatus, SaveStatus, UserRole
from app.models.kanban_card import CardTeam, KanbanCard
from app.models.lead import Lead
from app.models.wedding_plan import WeddingPlan
from app.services.base_service import BaseService
from app.services.wedding_plan_store import WeddingPlanStore
from app.tasks.matching_tasks import dispatch_card_sync

logger = logging.getLogger(__name__)

CardSyncScheduler = Callable[[str, dict[str, list[str]]], Any]

SORTABLE_FIELDS = {
    "created_at": Lead.created_at,
    "updated_at": Lead.updated_at,
    "wedding_date": Lead.wedding_date,
    "budget_min": Lead.budget_min,
    "budget_max": Lead.budget_max,
    "partner1_name": Lead.partner1_name,
    "status": Lead.status,
}


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as seen by the services."""

    user_id: str | None
    role: UserRole


@dataclass(frozen=True)
class LeadListQuery:
    page: int = 1
    limit: int | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"
    status: LeadStatus | None = None
    search: str | None = None
    include_archived: bool = False


@dataclass
class LeadPage:
    items: list[Lead]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


def _money(value: int | None) -> str:
    return f"{value:,}" if value is not None else "TBD"


def build_card_text(lead: Lead) -> tuple[str, str]:
    """Generate the kanban card title and description for a lead."""
    title = f"{lead.partner1_name or 'Partner'} & {lead.partner2_name or 'Partner'} - Wedding"
    wedding_date = lead.wedding_date.strftime("%d/%m/%Y") if lead.wedding_date else "TBD"
    source = lead.lead_source.value if lead.lead_source else "DIRECT"
    lines = [
        f"Wedding Date: {wedding_date}",
        f"Budget: {_money(lead.budget_min)} - {_money(lead.budget_max)}",
        f"Guests: {lead.guest_count_min or 'TBD'}-{lead.guest_count_max or 'TBD'}",
        f"Location: {', '.join(lead.preferred_locations or []) or 'TBD'}",
        f"Lead Source: {source}",
        f"Contact: {lead.primary_contact or lead.partner1_name}",
        f"Phone: {lead.phone_number or 'N/A'}",
        f"Email: {lead.email or 'N/A'}",
        f"Notes: {lead.initial_notes or 'No additional notes'}",
    ]
    return title, "\n".join(lines)


def _split_range(value: Any, label: str) -> tuple[int | None, int | None]:
    if value is None:
        return None, None
    if len(value) != 2:
        raise ValidationError(f"{label} must be a [min, max] pair")
    low, high = value
    if low is not None and high is not None and low > high:
        raise ValidationError(f"{label} minimum exceeds maximum")
    return low, high


class LeadService(BaseService):
    """Service for lead CRUD and status transitions."""

    def __init__(self, db=None, schedule_card_sync: CardSyncScheduler | None = None) -> None:
        super().__init__(db)
        self.schedule_card_sync = schedule_card_sync or dispatch_card_sync

    def _refresh_card_text(self, lead: Lead) -> None:
        lead.title, lead.description = build_card_text(lead)

    def create_lead(self, data: dict[str, Any], actor: Actor | None = None) -> Lead:
        payload = dict(data)
        for range_key, low_key, high_key in (
            ("guest_count", "guest_count_min", "guest_count_max"),
            ("budget_range", "budget_min", "budget_max"),
        ):
            low, high = _split_range(payload.pop(range_key, None), range_key)
            if low is not None or high is not None:
                payload[low_key], payload[high_key] = low, high
        payload = {key: value for key, value in payload.items() if value is not None}
        if actor is not None and actor.user_id and "created_by_id" not in payload:
            payload["created_by_id"] = actor.user_id

        lead = Lead(**payload)
        if lead.whatsapp_same_as_phone and not lead.whatsapp_number:
            lead.whatsapp_number = lead.phone_number
        self._refresh_card_text(lead)
        self.db.add(lead)
        self.commit()
        self.db.refresh(lead)
        logger.info("lead.created", extra={"event": "lead.created", "lead_id": lead.id})
        return lead

    def get_lead(self, lead_id: str, actor: Actor | None = None) -> Lead:
        lead = (
            self.db.query(Lead)
            .options(
                selectinload(Lead.cards).selectinload(KanbanCard.vendor),
                selectinload(Lead.cards).selectinload(KanbanCard.card_teams).selectinload(CardTeam.team),
                selectinload(Lead.wedding_plan).selectinload(WeddingPlan.events),
                selectinload(Lead.wedding_plan).selectinload(WeddingPlan.services),
            )
            .filter(Lead.id == lead_id)
            .first()
        )
        if lead is None or not self._visible_to(lead, actor):
            raise NotFoundError(f"Lead {lead_id} not found")
        return lead

    @staticmethod
    def _visible_to(lead: Lead, actor: Actor | None) -> bool:
        if actor is None or actor.role == UserRole.ADMIN:
            return True
        return lead.created_by_id == actor.user_id

    def list_leads(self, params: LeadListQuery | None = None, actor: Actor | None = None) -> LeadPage:
        params = params or LeadListQuery()
        limit = params.limit or get_config().LEADS_PAGE_SIZE
        page = max(params.page, 1)

        query = self.db.query(Lead)
        if not params.include_archived:
            query = query.filter(Lead.save_status != SaveStatus.ARCHIVED)
        if actor is not None and actor.role == UserRole.USER:
            query = query.filter(Lead.created_by_id == actor.user_id)
        if params.status is not None:
            query = query.filter(Lead.status == params.status)
        if params.search:
            pattern = f"%{params.search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(Lead.partner1_name).like(pattern),
                    func.lower(Lead.partner2_name).like(pattern),
                    func.lower(Lead.email).like(pattern),
                    Lead.phone_number.like(f"%{params.search}%"),
                )
            )

        column = SORTABLE_FIELDS.get(params.sort_by)
        if column is None:
            raise ValidationError(f"Cannot sort leads by {params.sort_by}")
        ordering = column.asc() if params.sort_order.lower() == "asc" else column.desc()

        total = query.count()
        items = query.order_by(ordering, Lead.id).offset((page - 1) * limit).limit(limit).all()
        return LeadPage(items=items, total=total, page=page, limit=limit)

    def update_lead(self, lead_id: str, changes: dict[str, Any], actor: Actor | None = None) -> Lead:
        """Apply scalar changes, optional plan upsert and optional card-sync scheduling."""
        lead = self.get_lead(lead_id, actor)
        payload = dict(changes)
        team_ids_by_vendor = payload.pop("team_ids_by_vendor", None) or {}
        plan_payload = payload.pop("wedding_plan", None)

        if "guest_count" in payload:
            lead.guest_count_min, lead.guest_count_max = _split_range(payload.pop("guest_count"), "guest_count")
        if "budget_range" in payload:
            lead.budget_min, lead.budget_max = _split_range(payload.pop("budget_range"), "budget_range")
        if "status" in payload and payload["status"] is not None:
            payload["status"] = LeadStatus(payload["status"])
        for key, value in payload.items():
            if not hasattr(Lead, key) or key in {"id", "created_at", "updated_at"}:
                raise ValidationError(f"Unsupported lead field: {key}")
            setattr(lead, key, value)
        self._refresh_card_text(lead)

        if plan_payload is not None:
            owner = (actor.user_id if actor else None) or lead.created_by_id
            WeddingPlanStore(self.db).upsert_plan(lead.id, owner, plan_payload)

        self.commit()
        self.db.refresh(lead)
        logger.info("lead.updated", extra={"event": "lead.updated", "lead_id": lead.id})

        if team_ids_by_vendor:
            # Cards appear asynchronously; the update never waits on them.
            self.schedule_card_sync(lead.id, team_ids_by_vendor)
        return lead

    def update_status(self, lead_id: str, status: LeadStatus, actor: Actor | None = None) -> Lead:
        lead = self.get_lead(lead_id, actor)
        lead.status = LeadStatus(status)
        self.commit()
        self.db.refresh(lead)
        logger.info(
            "lead.status_updated",
            extra={"event": "lead.status_updated", "lead_id": lead.id, "status": lead.status.value},
        )
        return lead

    def bulk_update_status(self, lead_ids: list[str], status: LeadStatus, actor: Actor | None = None) -> int:
        if not lead_ids:
            raise ValidationError("lead_ids must not be empty")
        query = self.db.query(Lead).filter(Lead.id.in_(lead_ids))
        if actor is not None and actor.role == UserRole.USER:
            query = query.filter(Lead.created_by_id == actor.user_id)
        updated = query.update({Lead.status: LeadStatus(status), Lead.updated_at: utcnow()}, synchronize_session=False)
        if updated == 0:
            self.rollback()
            raise NotFoundError("No leads matched the given ids")
        self.commit()
        logger.info("lead.bulk_status_updated", extra={"event": "lead.bulk_status_updated", "count": updated})
        return updated

    def set_archived(self, lead_id: str, archived: bool, actor: Actor | None = None) -> Lead:
        lead = self.get_lead(lead_id, actor)
        lead.save_status = SaveStatus.ARCHIVED if archived else SaveStatus.SUBMITTED
        self.commit()
        self.db.refresh(lead)
        return lead
