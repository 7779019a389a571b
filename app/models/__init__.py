"""SQLAlchemy model package for the wedding operations schema."""

from app.models.base import Base
from app.models.enums import (
    LeadSource,
    LeadStatus,
    LineItemStatus,
    NotificationType,
    PlanServiceStatus,
    ProposalAction,
    ProposalStatus,
    ProposalTemplate,
    SaveStatus,
    UserRole,
)
from app.models.kanban_card import CardTeam, KanbanCard
from app.models.lead import Lead
from app.models.notification import Notification
from app.models.proposal import (
    Proposal,
    ProposalCustomLine,
    ProposalServiceItem,
    ProposalVersion,
    ProposalVersionImmutableError,
)
from app.models.user import User
from app.models.vendor import Team, TeamMember, TeamMembership, Vendor, VendorService
from app.models.wedding_plan import WeddingEvent, WeddingPlan, WeddingPlanService

__all__ = [
    "Base",
    "CardTeam",
    "KanbanCard",
    "Lead",
    "LeadSource",
    "LeadStatus",
    "LineItemStatus",
    "Notification",
    "NotificationType",
    "PlanServiceStatus",
    "Proposal",
    "ProposalAction",
    "ProposalCustomLine",
    "ProposalServiceItem",
    "ProposalStatus",
    "ProposalTemplate",
    "ProposalVersion",
    "ProposalVersionImmutableError",
    "SaveStatus",
    "Team",
    "TeamMember",
    "TeamMembership",
    "User",
    "UserRole",
    "Vendor",
    "VendorService",
    "WeddingEvent",
    "WeddingPlan",
    "WeddingPlanService",
]
