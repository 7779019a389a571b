"""Flat pipeline list routes."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Header, Query

from app.api.v1._authz import authorize_request, http_error
from app.core.exceptions import MandapException
from app.database.db import get_db_session
from app.models.enums import LeadStatus
from app.schemas.pipeline import (
    PipelineLeadResponse,
    PipelineLeadUpdateRequest,
    PipelineStatusRequest,
    pipeline_lead_response,
)
from app.services.pipeline_service import PipelineFilters, PipelineService, pipeline_budget

router = APIRouter(prefix="/pipeline", tags=["pipeline"])


def _row(lead, archived: bool = False) -> PipelineLeadResponse:
    return pipeline_lead_response(lead, budget=pipeline_budget(lead), archived=archived)


@router.get("/leads", response_model=list[PipelineLeadResponse])
def list_pipeline_leads(
    assignee: str | None = Query(default=None, max_length=255),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    min_budget: int | None = Query(default=None, ge=0),
    max_budget: int | None = Query(default=None, ge=0),
    lead_status: LeadStatus | None = Query(default=None, alias="status"),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> list[PipelineLeadResponse]:
    authorize_request(authorization, scopes=["pipeline.read"])
    filters = PipelineFilters(
        assignee=assignee,
        start_date=start_date,
        end_date=end_date,
        min_budget=min_budget,
        max_budget=max_budget,
        status=lead_status,
    )
    with get_db_session() as db:
        return [_row(lead) for lead in PipelineService(db).list_pipeline_leads(filters)]


@router.put("/leads/{lead_id}", response_model=PipelineLeadResponse)
def update_pipeline_lead(
    lead_id: str,
    payload: PipelineLeadUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> PipelineLeadResponse:
    authorize_request(authorization, scopes=["pipeline.write"])
    with get_db_session() as db:
        try:
            lead = PipelineService(db).update_pipeline_lead(lead_id, payload.model_dump(exclude_unset=True))
        except MandapException as exc:
            raise http_error(exc) from exc
        return _row(lead)


@router.patch("/leads/{lead_id}/status", response_model=PipelineLeadResponse)
def update_pipeline_status(
    lead_id: str,
    payload: PipelineStatusRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> PipelineLeadResponse:
    authorize_request(authorization, scopes=["pipeline.write"])
    with get_db_session() as db:
        try:
            lead = PipelineService(db).update_pipeline_status(lead_id, payload.status)
        except MandapException as exc:
            raise http_error(exc) from exc
        return _row(lead)


@router.delete("/leads/{lead_id}/archive", response_model=PipelineLeadResponse)
def archive_pipeline_lead(
    lead_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> PipelineLeadResponse:
    authorize_request(authorization, scopes=["pipeline.write"])
    with get_db_session() as db:
        try:
            lead = PipelineService(db).archive_pipeline_lead(lead_id)
        except MandapException as exc:
            raise http_error(exc) from exc
        return _row(lead, archived=True)
