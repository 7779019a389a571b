"""Lead intake, listing and status routes."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Header, Query, status

from app.api.v1._authz import as_actor, authorize_request, http_error
from app.core.exceptions import MandapException
from app.database.db import get_db_session
from app.models.enums import LeadStatus
from app.schemas.leads import (
    BulkStatusResponse,
    LeadArchiveRequest,
    LeadBulkStatusRequest,
    LeadCreateRequest,
    LeadDetailResponse,
    LeadListResponse,
    LeadResponse,
    LeadStatusUpdateRequest,
    LeadUpdateRequest,
    lead_detail_response,
)
from app.schemas.pipeline import BoardsResponse, boards_response
from app.services.lead_service import LeadListQuery, LeadService
from app.services.pipeline_service import BoardFilters, PipelineService

router = APIRouter(prefix="/leads", tags=["leads"])


@router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
def create_lead(
    payload: LeadCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> LeadResponse:
    user = authorize_request(authorization, scopes=["leads.write"])
    with get_db_session() as db:
        try:
            lead = LeadService(db).create_lead(payload.model_dump(), actor=as_actor(user))
        except MandapException as exc:
            raise http_error(exc) from exc
        return LeadResponse.model_validate(lead)


@router.get("", response_model=LeadListResponse)
def list_leads(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
    sort_by: str = Query(default="created_at"),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    lead_status: LeadStatus | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None, max_length=255),
    include_archived: bool = Query(default=False),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> LeadListResponse:
    user = authorize_request(authorization, scopes=["leads.read"])
    params = LeadListQuery(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        status=lead_status,
        search=search,
        include_archived=include_archived,
    )
    with get_db_session() as db:
        try:
            result = LeadService(db).list_leads(params, actor=as_actor(user))
        except MandapException as exc:
            raise http_error(exc) from exc
        return LeadListResponse(
            items=[LeadResponse.model_validate(lead) for lead in result.items],
            total=result.total,
            page=result.page,
            limit=result.limit,
            pages=result.pages,
        )


@router.get("/board", response_model=BoardsResponse)
def get_board(
    search: str | None = Query(default=None, max_length=255),
    location: str | None = Query(default=None, max_length=255),
    budget_min: int | None = Query(default=None, ge=0),
    budget_max: int | None = Query(default=None, ge=0),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> BoardsResponse:
    authorize_request(authorization, scopes=["pipeline.read"])
    filters = BoardFilters(
        search=search,
        location=location,
        budget_min=budget_min,
        budget_max=budget_max,
        date_from=date_from,
        date_to=date_to,
    )
    with get_db_session() as db:
        return boards_response(PipelineService(db).get_boards(filters))


@router.post("/bulk-status", response_model=BulkStatusResponse)
def bulk_update_status(
    payload: LeadBulkStatusRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> BulkStatusResponse:
    user = authorize_request(authorization, scopes=["leads.write"])
    with get_db_session() as db:
        try:
            updated = LeadService(db).bulk_update_status(payload.lead_ids, payload.status, actor=as_actor(user))
        except MandapException as exc:
            raise http_error(exc) from exc
    return BulkStatusResponse(updated=updated)


@router.get("/{lead_id}", response_model=LeadDetailResponse)
def get_lead(
    lead_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> LeadDetailResponse:
    user = authorize_request(authorization, scopes=["leads.read"])
    with get_db_session() as db:
        try:
            lead = LeadService(db).get_lead(lead_id, actor=as_actor(user))
        except MandapException as exc:
            raise http_error(exc) from exc
        return lead_detail_response(lead)


@router.patch("/{lead_id}", response_model=LeadDetailResponse)
def update_lead(
    lead_id: str,
    payload: LeadUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> LeadDetailResponse:
    user = authorize_request(authorization, scopes=["leads.write"])
    with get_db_session() as db:
        service = LeadService(db)
        try:
            service.update_lead(lead_id, payload.model_dump(exclude_unset=True), actor=as_actor(user))
            lead = service.get_lead(lead_id, actor=as_actor(user))
        except MandapException as exc:
            raise http_error(exc) from exc
        return lead_detail_response(lead)


@router.patch("/{lead_id}/status", response_model=LeadResponse)
def update_lead_status(
    lead_id: str,
    payload: LeadStatusUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> LeadResponse:
    user = authorize_request(authorization, scopes=["leads.write"])
    with get_db_session() as db:
        try:
            lead = LeadService(db).update_status(lead_id, payload.status, actor=as_actor(user))
        except MandapException as exc:
            raise http_error(exc) from exc
        return LeadResponse.model_validate(lead)


@router.patch("/{lead_id}/archive", response_model=LeadResponse)
def archive_lead(
    lead_id: str,
    payload: LeadArchiveRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> LeadResponse:
    user = authorize_request(authorization, scopes=["leads.write"])
    with get_db_session() as db:
        try:
            lead = LeadService(db).set_archived(lead_id, payload.archived, actor=as_actor(user))
        except MandapException as exc:
            raise http_error(exc) from exc
        return LeadResponse.model_validate(lead)
