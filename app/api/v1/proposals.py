"""Proposal draft, version and lifecycle routes."""

from __future__ import annotations

from fastapi import APIRouter, Header, Query, status

from app.api.v1._authz import authorize_request, http_error
from app.core.exceptions import MandapException
from app.database.db import get_db_session
from app.models.enums import ProposalStatus
from app.schemas.proposals import (
    AssignmentFailure,
    AssignVendorsRequest,
    AssignVendorsResponse,
    ProposalDetailResponse,
    ProposalDraftRequest,
    ProposalResponse,
    ProposalStatusRequest,
    ProposalStatusResponse,
    ProposalSummaryResponse,
    ProposalVersionRequest,
    ProposalVersionResponse,
)
from app.services.proposal_service import ProposalService, ProposalWithVersions

router = APIRouter(prefix="/proposals", tags=["proposals"])


def _detail(result: ProposalWithVersions) -> ProposalDetailResponse:
    return ProposalDetailResponse(
        proposal=ProposalResponse.model_validate(result.proposal),
        versions=[ProposalVersionResponse.model_validate(version) for version in result.versions],
    )


@router.post("/draft/{lead_id}", response_model=ProposalResponse)
def save_draft(
    lead_id: str,
    payload: ProposalDraftRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> ProposalResponse:
    authorize_request(authorization, scopes=["proposals.write"])
    with get_db_session() as db:
        try:
            proposal = ProposalService(db).save_draft(lead_id, payload.model_dump(exclude_unset=True))
        except MandapException as exc:
            raise http_error(exc) from exc
        return ProposalResponse.model_validate(proposal)


@router.get("/draft/{lead_id}", response_model=ProposalDetailResponse)
def get_draft(
    lead_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> ProposalDetailResponse:
    authorize_request(authorization, scopes=["proposals.read"])
    with get_db_session() as db:
        try:
            result = ProposalService(db).get_draft(lead_id)
        except MandapException as exc:
            raise http_error(exc) from exc
        return _detail(result)


@router.get("", response_model=list[ProposalSummaryResponse])
def list_proposals(
    proposal_status: ProposalStatus | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None, max_length=255),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> list[ProposalSummaryResponse]:
    authorize_request(authorization, scopes=["proposals.read"])
    with get_db_session() as db:
        proposals = ProposalService(db).list_proposals(status=proposal_status, search=search)
        return [ProposalSummaryResponse.model_validate(item) for item in proposals]


@router.get("/{proposal_id}", response_model=ProposalDetailResponse)
def get_proposal(
    proposal_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> ProposalDetailResponse:
    authorize_request(authorization, scopes=["proposals.read"])
    with get_db_session() as db:
        try:
            result = ProposalService(db).get_proposal(proposal_id)
        except MandapException as exc:
            raise http_error(exc) from exc
        return _detail(result)


@router.post("/{proposal_id}/versions", response_model=ProposalVersionResponse, status_code=status.HTTP_201_CREATED)
def save_version(
    proposal_id: str,
    payload: ProposalVersionRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> ProposalVersionResponse:
    user = authorize_request(authorization, scopes=["proposals.write"])
    with get_db_session() as db:
        try:
            version = ProposalService(db).save_version(proposal_id, payload.snapshot, created_by_id=user.user_id)
        except MandapException as exc:
            raise http_error(exc) from exc
        return ProposalVersionResponse.model_validate(version)


@router.post("/{proposal_id}/finalize", response_model=ProposalResponse)
def finalize_proposal(
    proposal_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> ProposalResponse:
    authorize_request(authorization, scopes=["proposals.write"])
    with get_db_session() as db:
        try:
            proposal = ProposalService(db).finalize(proposal_id)
        except MandapException as exc:
            raise http_error(exc) from exc
        return ProposalResponse.model_validate(proposal)


@router.post("/{proposal_id}/status", response_model=ProposalStatusResponse)
def update_proposal_status(
    proposal_id: str,
    payload: ProposalStatusRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> ProposalStatusResponse:
    user = authorize_request(authorization, scopes=["proposals.respond"])
    with get_db_session() as db:
        try:
            result = ProposalService(db).update_status(proposal_id, user.role, payload.action)
        except MandapException as exc:
            raise http_error(exc) from exc
        return ProposalStatusResponse(
            changed=result.changed,
            message=result.message,
            proposal=ProposalResponse.model_validate(result.proposal),
        )


@router.post("/{proposal_id}/assign-vendors", response_model=AssignVendorsResponse)
def assign_vendors(
    proposal_id: str,
    payload: AssignVendorsRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> AssignVendorsResponse:
    authorize_request(authorization, scopes=["proposals.write"])
    assignments = [item.model_dump() for item in payload.assignments]
    with get_db_session() as db:
        try:
            result = ProposalService(db).assign_vendors(proposal_id, assignments)
        except MandapException as exc:
            raise http_error(exc) from exc
    return AssignVendorsResponse(
        assigned=result.assigned,
        failures=[AssignmentFailure(**failure) for failure in result.failures],
    )
