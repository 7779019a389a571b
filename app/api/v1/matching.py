"""Vendor matching and kanban card routes for a lead."""

from __future__ import annotations

from fastapi import APIRouter, Header, status

from app.api.v1._authz import authorize_request, http_error
from app.core.exceptions import MandapException
from app.database.db import get_db_session
from app.schemas.common import QueuedResponse
from app.schemas.leads import VendorCardResponse, card_response
from app.schemas.vendors import CardSyncRequest, CardUnassignRequest, CardUnassignResponse, MatchedVendorResponse
from app.services.vendor_matching_service import VendorMatchingService
from app.tasks.matching_tasks import dispatch_card_sync

router = APIRouter(prefix="/leads/{lead_id}", tags=["matching"])


@router.get("/matched-vendors", response_model=list[MatchedVendorResponse])
def matched_vendors(
    lead_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> list[MatchedVendorResponse]:
    authorize_request(authorization, scopes=["matching.read"])
    with get_db_session() as db:
        try:
            matches = VendorMatchingService(db).match_vendors_for_lead_id(lead_id)
        except MandapException as exc:
            raise http_error(exc) from exc
    return [MatchedVendorResponse.model_validate(item) for item in matches]


@router.get("/vendor-cards", response_model=list[VendorCardResponse])
def list_vendor_cards(
    lead_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> list[VendorCardResponse]:
    authorize_request(authorization, scopes=["matching.read"])
    with get_db_session() as db:
        try:
            cards = VendorMatchingService(db).list_cards_for_lead(lead_id)
        except MandapException as exc:
            raise http_error(exc) from exc
        return [card_response(card) for card in cards]


@router.post("/vendor-cards", response_model=QueuedResponse, status_code=status.HTTP_202_ACCEPTED)
def queue_vendor_cards(
    lead_id: str,
    payload: CardSyncRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> QueuedResponse:
    authorize_request(authorization, scopes=["matching.write"])
    with get_db_session() as db:
        try:
            VendorMatchingService(db).get_lead(lead_id)
        except MandapException as exc:
            raise http_error(exc) from exc
    task_id = dispatch_card_sync(lead_id, payload.team_ids_by_vendor)
    return QueuedResponse(status="queued" if task_id else "dispatch_failed", task_id=task_id)


@router.post("/vendor-cards/unassign", response_model=CardUnassignResponse)
def unassign_vendor_cards(
    lead_id: str,
    payload: CardUnassignRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> CardUnassignResponse:
    authorize_request(authorization, scopes=["matching.write"])
    with get_db_session() as db:
        try:
            removed = VendorMatchingService(db).unassign_teams(lead_id, payload.vendor_id, payload.team_ids)
        except MandapException as exc:
            raise http_error(exc) from exc
    return CardUnassignResponse(removed=removed)
