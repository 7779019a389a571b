"""Proposal request/response schemas for API contracts."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import LineItemStatus, ProposalStatus, ProposalTemplate


class ProposalServiceInput(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    category: str | None = Field(default=None, max_length=120)
    price: float = Field(default=0.0, ge=0)
    quantity: int = Field(default=1, ge=1)
    vendor_id: str | None = None
    vendor_service_id: str | None = None


class ProposalCustomLineInput(BaseModel):
    label: str = Field(min_length=1, max_length=255)
    unit_price: float = Field(default=0.0, ge=0)
    quantity: int = Field(default=1, ge=1)


class ProposalDraftRequest(BaseModel):
    title: str | None = Field(default=None, max_length=512)
    template: ProposalTemplate | None = None
    company_name: str | None = Field(default=None, max_length=255)
    company_email: str | None = Field(default=None, max_length=320)
    company_phone: str | None = Field(default=None, max_length=40)
    company_address: str | None = None
    client_name: str | None = Field(default=None, max_length=255)
    client_email: str | None = Field(default=None, max_length=320)
    client_phone: str | None = Field(default=None, max_length=40)
    intro_html: str | None = None
    terms_text: str | None = None
    payment_terms: str | None = None
    taxes_percent: float | None = Field(default=None, ge=0, le=100)
    discount: float | None = Field(default=None, ge=0)
    budget_min: int | None = Field(default=None, ge=0)
    budget_max: int | None = Field(default=None, ge=0)
    guest_count_min: int | None = Field(default=None, ge=0)
    guest_count_max: int | None = Field(default=None, ge=0)
    preferred_locations: list[str] | None = None
    events: list[dict[str, Any]] | None = None
    services: list[ProposalServiceInput] | None = None
    custom_lines: list[ProposalCustomLineInput] | None = None


class ProposalVersionRequest(BaseModel):
    snapshot: dict[str, Any] | None = None


class ProposalStatusRequest(BaseModel):
    action: str = Field(min_length=1, max_length=20)


class VendorAssignment(BaseModel):
    service_id: str = Field(min_length=1)
    vendor_id: str = Field(min_length=1)


class AssignVendorsRequest(BaseModel):
    assignments: list[VendorAssignment] = Field(min_length=1)


class ProposalServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order: int
    name: str
    description: str | None = None
    category: str | None = None
    price: float
    quantity: int
    vendor_id: str | None = None
    vendor_service_id: str | None = None
    status: LineItemStatus
    updated_at: datetime | None = None


class ProposalCustomLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order: int
    label: str
    unit_price: float
    quantity: int


class ProposalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    lead_id: str
    reference: str
    title: str | None = None
    template: ProposalTemplate
    company_name: str | None = None
    company_email: str | None = None
    company_phone: str | None = None
    company_address: str | None = None
    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    intro_html: str | None = None
    terms_text: str | None = None
    payment_terms: str | None = None
    taxes_percent: float
    discount: float
    subtotal: float
    grand_total: float
    status: ProposalStatus
    budget_min: int | None = None
    budget_max: int | None = None
    guest_count_min: int | None = None
    guest_count_max: int | None = None
    preferred_locations: list[str] = Field(default_factory=list)
    events: list[dict[str, Any]] = Field(default_factory=list)
    services: list[ProposalServiceResponse] = Field(default_factory=list)
    custom_lines: list[ProposalCustomLineResponse] = Field(default_factory=list)
    sent_at: datetime | None = None
    viewed_at: datetime | None = None
    accepted_at: datetime | None = None
    rejected_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProposalSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    lead_id: str
    reference: str
    title: str | None = None
    client_name: str | None = None
    status: ProposalStatus
    grand_total: float
    created_at: datetime | None = None


class ProposalVersionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    proposal_id: str
    snapshot: dict[str, Any]
    created_by_id: str | None = None
    created_at: datetime


class ProposalDetailResponse(BaseModel):
    proposal: ProposalResponse
    versions: list[ProposalVersionResponse]


class ProposalStatusResponse(BaseModel):
    changed: bool
    message: str
    proposal: ProposalResponse


class AssignmentFailure(BaseModel):
    service_id: str
    reason: str


class AssignVendorsResponse(BaseModel):
    assigned: list[str]
    failures: list[AssignmentFailure]
