"""Canonical enum values for the wedding operations schema."""

from __future__ import annotations

import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"
    VENDOR = "vendor"


class LeadStatus(str, enum.Enum):
    INQUIRY = "INQUIRY"
    PROPOSAL = "PROPOSAL"
    BOOKED = "BOOKED"
    COMPLETED = "COMPLETED"


class SaveStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    ARCHIVED = "ARCHIVED"


class LeadSource(str, enum.Enum):
    DIRECT = "DIRECT"
    WEBSITE = "WEBSITE"
    REFERRAL = "REFERRAL"
    SOCIAL_MEDIA = "SOCIAL_MEDIA"
    WEDDING_FAIR = "WEDDING_FAIR"
    OTHER = "OTHER"


class ProposalStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    VIEWED = "VIEWED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class ProposalAction(str, enum.Enum):
    VIEW = "view"
    ACCEPT = "accept"
    REJECT = "reject"


class ProposalTemplate(str, enum.Enum):
    CLASSIC = "classic"
    MODERN = "modern"
    TRADITIONAL = "traditional"
    SCRATCH = "scratch"


class LineItemStatus(str, enum.Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"


class PlanServiceStatus(str, enum.Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class NotificationType(str, enum.Enum):
    PROPOSAL_SENT = "PROPOSAL_SENT"
    PROPOSAL_VIEWED = "PROPOSAL_VIEWED"
    PROPOSAL_ACCEPTED = "PROPOSAL_ACCEPTED"
    PROPOSAL_REJECTED = "PROPOSAL_REJECTED"
