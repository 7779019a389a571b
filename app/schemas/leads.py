"""Lead request/response schemas for API contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.enums import LeadSource, LeadStatus, PlanServiceStatus, SaveStatus


def _check_range(low: int | None, high: int | None, label: str) -> None:
    if low is not None and high is not None and low > high:
        raise ValueError(f"{label} minimum must not exceed maximum")


class WeddingEventInput(BaseModel):
    id: str | None = None
    name: str = Field(min_length=1, max_length=255)
    date: datetime | None = None
    start_time: str | None = Field(default=None, max_length=20)
    end_time: str | None = Field(default=None, max_length=20)


class WeddingPlanServiceInput(BaseModel):
    id: str | None = None
    vendor_service_id: str | None = None
    quantity: int = Field(default=1, ge=1)
    notes: str | None = Field(default=None, max_length=2000)


class WeddingPlanInput(BaseModel):
    total_budget: int | None = Field(default=None, ge=0)
    guests: int | None = Field(default=None, ge=0)
    events: list[WeddingEventInput] = Field(default_factory=list)
    services: list[WeddingPlanServiceInput] = Field(default_factory=list)


class LeadCreateRequest(BaseModel):
    partner1_name: str = Field(min_length=1, max_length=255)
    partner2_name: str | None = Field(default=None, max_length=255)
    primary_contact: str | None = Field(default=None, max_length=255)
    phone_number: str | None = Field(default=None, max_length=40)
    whatsapp_number: str | None = Field(default=None, max_length=40)
    whatsapp_same_as_phone: bool = False
    email: str | None = Field(default=None, min_length=3, max_length=320)
    wedding_date: datetime | None = None
    flexible_dates: bool = False
    guest_count_min: int | None = Field(default=None, ge=0)
    guest_count_max: int | None = Field(default=None, ge=0)
    budget_min: int | None = Field(default=None, ge=0)
    budget_max: int | None = Field(default=None, ge=0)
    budget: int | None = Field(default=None, ge=0)
    preferred_locations: list[str] = Field(default_factory=list)
    lead_source: LeadSource | None = None
    referral_details: str | None = Field(default=None, max_length=2000)
    initial_notes: str | None = Field(default=None, max_length=5000)
    service_types: str | None = Field(default=None, max_length=1000)
    status: LeadStatus = LeadStatus.INQUIRY
    save_status: SaveStatus = SaveStatus.SUBMITTED

    @model_validator(mode="after")
    def _ranges(self) -> "LeadCreateRequest":
        _check_range(self.budget_min, self.budget_max, "budget")
        _check_range(self.guest_count_min, self.guest_count_max, "guest count")
        return self


class LeadUpdateRequest(BaseModel):
    partner1_name: str | None = Field(default=None, min_length=1, max_length=255)
    partner2_name: str | None = Field(default=None, max_length=255)
    primary_contact: str | None = Field(default=None, max_length=255)
    phone_number: str | None = Field(default=None, max_length=40)
    whatsapp_number: str | None = Field(default=None, max_length=40)
    email: str | None = Field(default=None, min_length=3, max_length=320)
    wedding_date: datetime | None = None
    flexible_dates: bool | None = None
    budget: int | None = Field(default=None, ge=0)
    budget_range: list[int] | None = Field(default=None, min_length=2, max_length=2)
    guest_count: list[int] | None = Field(default=None, min_length=2, max_length=2)
    preferred_locations: list[str] | None = None
    lead_source: LeadSource | None = None
    referral_details: str | None = Field(default=None, max_length=2000)
    initial_notes: str | None = Field(default=None, max_length=5000)
    service_types: str | None = Field(default=None, max_length=1000)
    status: LeadStatus | None = None
    wedding_plan: WeddingPlanInput | None = None
    team_ids_by_vendor: dict[str, list[str]] | None = None

    @model_validator(mode="after")
    def _ranges(self) -> "LeadUpdateRequest":
        if self.budget_range:
            _check_range(self.budget_range[0], self.budget_range[1], "budget")
        if self.guest_count:
            _check_range(self.guest_count[0], self.guest_count[1], "guest count")
        return self


class LeadStatusUpdateRequest(BaseModel):
    status: LeadStatus


class LeadBulkStatusRequest(BaseModel):
    lead_ids: list[str] = Field(min_length=1, max_length=500)
    status: LeadStatus


class LeadArchiveRequest(BaseModel):
    archived: bool = True


class LeadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    partner1_name: str | None = None
    partner2_name: str | None = None
    primary_contact: str | None = None
    phone_number: str | None = None
    whatsapp_number: str | None = None
    email: str | None = None
    wedding_date: datetime | None = None
    flexible_dates: bool = False
    guest_count_min: int | None = None
    guest_count_max: int | None = None
    budget_min: int | None = None
    budget_max: int | None = None
    budget: int | None = None
    preferred_locations: list[str] = Field(default_factory=list)
    lead_source: LeadSource | None = None
    referral_details: str | None = None
    initial_notes: str | None = None
    service_types: str | None = None
    title: str | None = None
    description: str | None = None
    status: LeadStatus
    save_status: SaveStatus
    created_by_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LeadListResponse(BaseModel):
    items: list[LeadResponse]
    total: int
    page: int
    limit: int
    pages: int


class BulkStatusResponse(BaseModel):
    updated: int


class CardTeamResponse(BaseModel):
    team_id: str
    team_name: str | None = None


class VendorCardResponse(BaseModel):
    id: str
    vendor_id: str
    vendor_name: str | None = None
    teams: list[CardTeamResponse] = Field(default_factory=list)


class WeddingEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    date: datetime | None = None
    start_time: str | None = None
    end_time: str | None = None


class WeddingPlanServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    vendor_service_id: str | None = None
    quantity: int
    notes: str | None = None
    status: PlanServiceStatus


class WeddingPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    total_budget: int | None = None
    guests: int | None = None
    events: list[WeddingEventResponse] = Field(default_factory=list)
    services: list[WeddingPlanServiceResponse] = Field(default_factory=list)


class LeadDetailResponse(LeadResponse):
    cards: list[VendorCardResponse] = Field(default_factory=list)
    wedding_plan: WeddingPlanResponse | None = None


def card_response(card) -> VendorCardResponse:
    return VendorCardResponse(
        id=card.id,
        vendor_id=card.vendor_id,
        vendor_name=card.vendor.name if card.vendor else None,
        teams=[
            CardTeamResponse(team_id=link.team_id, team_name=link.team.name if link.team else None)
            for link in card.card_teams
        ],
    )


def lead_detail_response(lead) -> LeadDetailResponse:
    base = LeadResponse.model_validate(lead).model_dump()
    return LeadDetailResponse(
        **base,
        cards=[card_response(card) for card in lead.cards],
        wedding_plan=WeddingPlanResponse.model_validate(lead.wedding_plan) if lead.wedding_plan else None,
    )
