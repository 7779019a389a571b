"""Pydantic schema package for API contracts."""

from app.schemas.common import QueuedResponse
from app.schemas.leads import (
    LeadBulkStatusRequest,
    LeadCreateRequest,
    LeadDetailResponse,
    LeadListResponse,
    LeadResponse,
    LeadStatusUpdateRequest,
    LeadUpdateRequest,
)
from app.schemas.notifications import NotificationResponse
from app.schemas.pipeline import BoardsResponse, PipelineLeadResponse
from app.schemas.proposals import (
    AssignVendorsRequest,
    ProposalDetailResponse,
    ProposalDraftRequest,
    ProposalResponse,
    ProposalStatusRequest,
)
from app.schemas.vendors import CardSyncRequest, MatchedVendorResponse

__all__ = [
    "AssignVendorsRequest",
    "BoardsResponse",
    "CardSyncRequest",
    "LeadBulkStatusRequest",
    "LeadCreateRequest",
    "LeadDetailResponse",
    "LeadListResponse",
    "LeadResponse",
    "LeadStatusUpdateRequest",
    "LeadUpdateRequest",
    "MatchedVendorResponse",
    "NotificationResponse",
    "PipelineLeadResponse",
    "ProposalDetailResponse",
    "ProposalDraftRequest",
    "ProposalResponse",
    "ProposalStatusRequest",
    "QueuedResponse",
]
