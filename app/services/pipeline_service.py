"""Pipeline board aggregation and pipeline-side lead maintenance."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import selectinload

from app.core.config import get_config
from app.core.exceptions import ValidationError
from app.models.base import as_utc, utcnow
from app.models.enums import LeadStatus, SaveStatus
from app.models.lead import Lead
from app.models.user import User
from app.services.base_service import BaseService

logger = logging.getLogger(__name__)

BOARD_LAYOUT: tuple[tuple[str, str, LeadStatus], ...] = (
    ("inquiry", "Inquiry", LeadStatus.INQUIRY),
    ("proposal", "Proposal", LeadStatus.PROPOSAL),
    ("booked", "Booked", LeadStatus.BOOKED),
    ("completed", "Completed", LeadStatus.COMPLETED),
)

UNASSIGNED = "Unassigned"
SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class BoardFilters:
    search: str | None = None
    location: str | None = None
    budget_min: int | None = None
    budget_max: int | None = None
    date_from: date | None = None
    date_to: date | None = None


@dataclass
class BoardCard:
    lead: Lead
    board_id: str
    days_in_stage: int


@dataclass
class Board:
    id: str
    name: str
    order: int
    status: LeadStatus
    cards: list[BoardCard] = field(default_factory=list)


@dataclass
class BoardView:
    boards: list[Board]
    budget_range: tuple[int, int]


@dataclass(frozen=True)
class PipelineFilters:
    assignee: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    min_budget: int | None = None
    max_budget: int | None = None
    status: LeadStatus | None = None


def days_in_stage(updated_at: datetime, now: datetime) -> int:
    """Whole days elapsed since the lead last changed."""
    elapsed = (now - as_utc(updated_at)).total_seconds()
    return int(elapsed // SECONDS_PER_DAY)


def day_start(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def day_end(value: date) -> datetime:
    return datetime.combine(value, time.max, tzinfo=timezone.utc)


def pipeline_budget(lead: Lead) -> int:
    """Single budget figure shown on pipeline rows: `budget`, else the range midpoint."""
    if lead.budget:
        return lead.budget
    return ((lead.budget_min or 0) + (lead.budget_max or 0)) // 2


class PipelineService(BaseService):
    """Read-only board projection plus pipeline list maintenance."""

    def _active_leads(self):
        return self.db.query(Lead).filter(Lead.save_status != SaveStatus.ARCHIVED)

    def budget_range(self) -> tuple[int, int]:
        """Min/max budget over every non-archived lead, ignoring board filters."""
        config = get_config()
        low, high = (
            self.db.query(func.min(Lead.budget_min), func.max(Lead.budget_max))
            .filter(Lead.save_status != SaveStatus.ARCHIVED)
            .one()
        )
        return (
            int(low) if low is not None else config.BOARD_DEFAULT_BUDGET_MIN,
            int(high) if high is not None else config.BOARD_DEFAULT_BUDGET_MAX,
        )

    def get_boards(self, filters: BoardFilters | None = None, now: datetime | None = None) -> BoardView:
        filters = filters or BoardFilters()
        now = as_utc(now) if now else utcnow()

        query = self._active_leads().options(selectinload(Lead.created_by))
        if filters.search:
            pattern = f"%{filters.search.lower()}%"
            query = query.filter(
                or_(func.lower(Lead.partner1_name).like(pattern), func.lower(Lead.partner2_name).like(pattern))
            )
        if filters.budget_min is not None:
            query = query.filter(Lead.budget_min >= filters.budget_min)
        if filters.budget_max is not None:
            query = query.filter(Lead.budget_max <= filters.budget_max)
        if filters.date_from is not None:
            query = query.filter(Lead.wedding_date >= day_start(filters.date_from))
        if filters.date_to is not None:
            query = query.filter(Lead.wedding_date <= day_end(filters.date_to))

        leads = query.order_by(Lead.created_at.desc()).all()
        if filters.location:
            # Leads without any preferred location are open to every location.
            leads = [lead for lead in leads if not lead.preferred_locations or filters.location in lead.preferred_locations]

        boards = [
            Board(id=board_id, name=name, order=order, status=status)
            for order, (board_id, name, status) in enumerate(BOARD_LAYOUT)
        ]
        by_status = {board.status: board for board in boards}
        for lead in leads:
            board = by_status[lead.status]
            board.cards.append(BoardCard(lead=lead, board_id=board.id, days_in_stage=days_in_stage(lead.updated_at, now)))

        return BoardView(boards=boards, budget_range=self.budget_range())

    def list_pipeline_leads(self, filters: PipelineFilters | None = None) -> list[Lead]:
        filters = filters or PipelineFilters()
        query = self._active_leads().options(selectinload(Lead.created_by))

        if filters.assignee and filters.assignee != "all":
            if filters.assignee == UNASSIGNED:
                query = query.filter(Lead.created_by_id.is_(None))
            else:
                query = query.join(User, Lead.created_by_id == User.id).filter(User.name == filters.assignee)
        if filters.start_date is not None:
            query = query.filter(Lead.wedding_date >= day_start(filters.start_date))
        if filters.end_date is not None:
            query = query.filter(Lead.wedding_date <= day_end(filters.end_date))
        if filters.min_budget is not None:
            query = query.filter(
                or_(
                    Lead.budget >= filters.min_budget,
                    (Lead.budget.is_(None)) & (Lead.budget_min >= filters.min_budget),
                )
            )
        if filters.max_budget is not None:
            query = query.filter(
                or_(
                    Lead.budget <= filters.max_budget,
                    (Lead.budget.is_(None)) & (Lead.budget_max <= filters.max_budget),
                )
            )
        if filters.status is not None:
            query = query.filter(Lead.status == filters.status)

        return query.order_by(Lead.updated_at.desc()).all()

    def update_pipeline_lead(self, lead_id: str, changes: dict[str, Any]) -> Lead:
        allowed = {"partner1_name", "partner2_name", "wedding_date", "budget", "budget_min", "budget_max", "created_by_id", "status"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Unsupported pipeline fields: {', '.join(sorted(unknown))}")

        lead = self.get_or_404(Lead, lead_id)
        for key, value in changes.items():
            if key == "status":
                value = self._coerce_status(value)
            setattr(lead, key, value)
        self.commit()
        self.db.refresh(lead)
        logger.info("pipeline.lead_updated", extra={"event": "pipeline.lead_updated", "lead_id": lead_id})
        return lead

    @staticmethod
    def _coerce_status(value: Any) -> LeadStatus:
        try:
            return LeadStatus(value)
        except ValueError as exc:
            raise ValidationError(f"Invalid lead status: {value}") from exc

    def update_pipeline_status(self, lead_id: str, status: Any) -> Lead:
        new_status = self._coerce_status(status)
        lead = self.get_or_404(Lead, lead_id)
        lead.status = new_status
        self.commit()
        self.db.refresh(lead)
        logger.info(
            "pipeline.lead_status_updated",
            extra={"event": "pipeline.lead_status_updated", "lead_id": lead_id, "status": new_status.value},
        )
        return lead

    def archive_pipeline_lead(self, lead_id: str) -> Lead:
        lead = self.get_or_404(Lead, lead_id)
        lead.save_status = SaveStatus.ARCHIVED
        self.commit()
        self.db.refresh(lead)
        logger.info("pipeline.lead_archived", extra={"event": "pipeline.lead_archived", "lead_id": lead_id})
        return lead
