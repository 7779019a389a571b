"""Vendor matching and kanban card schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MatchedVendorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    contact_no: str | None = None
    service_types: str | None = None
    minimum_amount: int
    maximum_amount: int
    team_count: int
    match_score: int


class CardSyncRequest(BaseModel):
    team_ids_by_vendor: dict[str, list[str]] = Field(min_length=1)


class CardUnassignRequest(BaseModel):
    vendor_id: str = Field(min_length=1)
    team_ids: list[str] | None = None


class CardUnassignResponse(BaseModel):
    removed: int
