"""Proposal model module: proposals, line items and append-only versions."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    event,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, Base, IdMixin, utcnow
from app.models.enums import LineItemStatus, ProposalStatus, ProposalTemplate
from app.utils.ids import new_proposal_reference

_DRAFT_ONLY = text("status = 'DRAFT'")


class Proposal(Base, IdMixin, AuditMixin):
    __tablename__ = "proposals"
    __table_args__ = (
        # A lead never holds more than one DRAFT proposal.
        Index(
            "uq_proposals_lead_draft",
            "lead_id",
            unique=True,
            postgresql_where=_DRAFT_ONLY,
            sqlite_where=_DRAFT_ONLY,
        ),
        Index("idx_proposals_lead_status", "lead_id", "status"),
    )

    lead_id: Mapped[str] = mapped_column(ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    reference: Mapped[str] = mapped_column(String(32), default=new_proposal_reference, nullable=False, unique=True)
    title: Mapped[str | None] = mapped_column(String(512))
    template: Mapped[ProposalTemplate] = mapped_column(
        Enum(ProposalTemplate, values_callable=lambda members: [m.value for m in members]),
        default=ProposalTemplate.CLASSIC,
        nullable=False,
    )
    company_name: Mapped[str | None] = mapped_column(String(255))
    company_email: Mapped[str | None] = mapped_column(String(320))
    company_phone: Mapped[str | None] = mapped_column(String(40))
    company_address: Mapped[str | None] = mapped_column(Text)
    client_name: Mapped[str | None] = mapped_column(String(255))
    client_email: Mapped[str | None] = mapped_column(String(320))
    client_phone: Mapped[str | None] = mapped_column(String(40))
    intro_html: Mapped[str | None] = mapped_column(Text)
    terms_text: Mapped[str | None] = mapped_column(Text)
    payment_terms: Mapped[str | None] = mapped_column(Text)
    taxes_percent: Mapped[float] = mapped_column(Float, default=18.0, nullable=False)
    discount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    subtotal: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    grand_total: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    status: Mapped[ProposalStatus] = mapped_column(
        Enum(ProposalStatus), default=ProposalStatus.DRAFT, nullable=False
    )
    budget_min: Mapped[int | None] = mapped_column(BigInteger)
    budget_max: Mapped[int | None] = mapped_column(BigInteger)
    guest_count_min: Mapped[int | None] = mapped_column(Integer)
    guest_count_max: Mapped[int | None] = mapped_column(Integer)
    preferred_locations: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    events: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    viewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    lead = relationship("Lead", back_populates="proposals")
    services = relationship(
        "ProposalServiceItem",
        back_populates="proposal",
        cascade="all, delete-orphan",
        order_by="ProposalServiceItem.order",
    )
    custom_lines = relationship(
        "ProposalCustomLine",
        back_populates="proposal",
        cascade="all, delete-orphan",
        order_by="ProposalCustomLine.order",
    )
    versions = relationship(
        "ProposalVersion",
        back_populates="proposal",
        cascade="all, delete-orphan",
        order_by="ProposalVersion.created_at",
    )


class ProposalServiceItem(Base, IdMixin, AuditMixin):
    """A catalog-backed line item on a proposal."""

    __tablename__ = "proposal_services"
    __table_args__ = (Index("idx_proposal_services_proposal", "proposal_id"),)

    proposal_id: Mapped[str] = mapped_column(ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(String(120))
    price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    vendor_id: Mapped[str | None] = mapped_column(ForeignKey("vendors.id", ondelete="SET NULL"))
    vendor_service_id: Mapped[str | None] = mapped_column(ForeignKey("vendor_services.id", ondelete="SET NULL"))
    status: Mapped[LineItemStatus] = mapped_column(
        Enum(LineItemStatus), default=LineItemStatus.PENDING, nullable=False
    )

    proposal = relationship("Proposal", back_populates="services")
    vendor = relationship("Vendor")


class ProposalCustomLine(Base, IdMixin, AuditMixin):
    __tablename__ = "proposal_custom_lines"
    __table_args__ = (Index("idx_proposal_custom_lines_proposal", "proposal_id"),)

    proposal_id: Mapped[str] = mapped_column(ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    proposal = relationship("Proposal", back_populates="custom_lines")


class ProposalVersion(Base, IdMixin):
    """Immutable snapshot of a proposal at a point in time."""

    __tablename__ = "proposal_versions"
    __table_args__ = (Index("idx_proposal_versions_proposal_created", "proposal_id", "created_at"),)

    proposal_id: Mapped[str] = mapped_column(ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False)
    snapshot: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_by_id: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    proposal = relationship("Proposal", back_populates="versions")


class ProposalVersionImmutableError(RuntimeError):
    """Raised when an existing proposal version would be modified."""


@event.listens_for(ProposalVersion, "before_update")
def _reject_version_update(mapper, connection, target: ProposalVersion) -> None:
    raise ProposalVersionImmutableError(f"Proposal version {target.id} is append-only")
