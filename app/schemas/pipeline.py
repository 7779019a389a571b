"""Pipeline board and list schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.models.enums import LeadSource, LeadStatus, SaveStatus


class AssignedUser(BaseModel):
    id: str
    name: str
    email: str


class BoardLeadData(BaseModel):
    partner1_name: str | None = None
    partner2_name: str | None = None
    wedding_date: datetime | None = None
    budget_min: int | None = None
    budget_max: int | None = None
    budget: int | None = None
    phone_number: str | None = None
    email: str | None = None
    status: LeadStatus
    days_in_stage: int
    guest_count_min: int | None = None
    guest_count_max: int | None = None
    lead_source: LeadSource | None = None
    save_status: SaveStatus
    preferred_locations: list[str] = Field(default_factory=list)


class BoardCardResponse(BaseModel):
    id: str
    title: str
    description: str
    kanban_board_id: str
    lead_data: BoardLeadData
    assigned_user: AssignedUser | None = None
    created_at: datetime
    updated_at: datetime


class BoardResponse(BaseModel):
    id: str
    name: str
    order: int
    cards: list[BoardCardResponse]


class BoardsResponse(BaseModel):
    boards: list[BoardResponse]
    budget_range: tuple[int, int]


class PipelineLeadResponse(BaseModel):
    id: str
    couple: str
    wedding_date: datetime | None = None
    budget: int
    stage: LeadStatus
    date_in_stage: datetime
    assignee: str | None = None
    archived: bool = False


class PipelineLeadUpdateRequest(BaseModel):
    partner1_name: str | None = Field(default=None, min_length=1, max_length=255)
    partner2_name: str | None = Field(default=None, max_length=255)
    wedding_date: datetime | None = None
    budget: int | None = Field(default=None, ge=0)
    budget_min: int | None = Field(default=None, ge=0)
    budget_max: int | None = Field(default=None, ge=0)
    created_by_id: str | None = None
    status: str | None = None


class PipelineStatusRequest(BaseModel):
    status: str = Field(min_length=1, max_length=40)


def _couple(lead) -> str:
    return f"{lead.partner1_name or ''}{' & ' + lead.partner2_name if lead.partner2_name else ''}"


def board_card_response(card) -> BoardCardResponse:
    lead = card.lead
    owner = lead.created_by
    return BoardCardResponse(
        id=lead.id,
        title=_couple(lead),
        description=lead.initial_notes or "",
        kanban_board_id=card.board_id,
        lead_data=BoardLeadData(
            partner1_name=lead.partner1_name,
            partner2_name=lead.partner2_name,
            wedding_date=lead.wedding_date,
            budget_min=lead.budget_min,
            budget_max=lead.budget_max,
            budget=lead.budget,
            phone_number=lead.phone_number,
            email=lead.email,
            status=lead.status,
            days_in_stage=card.days_in_stage,
            guest_count_min=lead.guest_count_min,
            guest_count_max=lead.guest_count_max,
            lead_source=lead.lead_source,
            save_status=lead.save_status,
            preferred_locations=list(lead.preferred_locations or []),
        ),
        assigned_user=AssignedUser(id=owner.id, name=owner.name, email=owner.email) if owner else None,
        created_at=lead.created_at,
        updated_at=lead.updated_at,
    )


def boards_response(view) -> BoardsResponse:
    return BoardsResponse(
        boards=[
            BoardResponse(
                id=board.id,
                name=board.name,
                order=board.order,
                cards=[board_card_response(card) for card in board.cards],
            )
            for board in view.boards
        ],
        budget_range=view.budget_range,
    )


def pipeline_lead_response(lead, budget: int, archived: bool = False) -> PipelineLeadResponse:
    return PipelineLeadResponse(
        id=lead.id,
        couple=_couple(lead),
        wedding_date=lead.wedding_date,
        budget=budget,
        stage=lead.status,
        date_in_stage=lead.updated_at,
        assignee=lead.created_by.name if lead.created_by else None,
        archived=archived,
    )
