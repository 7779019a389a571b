"""Lead model module."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, Base, IdMixin
from app.models.enums import LeadSource, LeadStatus, SaveStatus


class Lead(Base, IdMixin, AuditMixin):
    __tablename__ = "leads"
    __table_args__ = (
        Index("idx_leads_status", "status"),
        Index("idx_leads_save_status", "save_status"),
        Index("idx_leads_created_by", "created_by_id"),
    )

    partner1_name: Mapped[str | None] = mapped_column(String(255))
    partner2_name: Mapped[str | None] = mapped_column(String(255))
    primary_contact: Mapped[str | None] = mapped_column(String(255))
    phone_number: Mapped[str | None] = mapped_column(String(40))
    whatsapp_number: Mapped[str | None] = mapped_column(String(40))
    whatsapp_same_as_phone: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    email: Mapped[str | None] = mapped_column(String(320))
    wedding_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    flexible_dates: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    guest_count_min: Mapped[int | None] = mapped_column(Integer)
    guest_count_max: Mapped[int | None] = mapped_column(Integer)
    budget_min: Mapped[int | None] = mapped_column(BigInteger)
    budget_max: Mapped[int | None] = mapped_column(BigInteger)
    budget: Mapped[int | None] = mapped_column(BigInteger)
    preferred_locations: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    lead_source: Mapped[LeadSource | None] = mapped_column(Enum(LeadSource))
    referral_details: Mapped[str | None] = mapped_column(Text)
    initial_notes: Mapped[str | None] = mapped_column(Text)
    service_types: Mapped[str | None] = mapped_column(Text)
    title: Mapped[str | None] = mapped_column(String(512))
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[LeadStatus] = mapped_column(Enum(LeadStatus), default=LeadStatus.INQUIRY, nullable=False)
    save_status: Mapped[SaveStatus] = mapped_column(Enum(SaveStatus), default=SaveStatus.SUBMITTED, nullable=False)
    created_by_id: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))

    created_by = relationship("User")
    cards = relationship("KanbanCard", back_populates="lead", cascade="all, delete-orphan")
    proposals = relationship("Proposal", back_populates="lead")
    wedding_plan = relationship("WeddingPlan", back_populates="lead", uselist=False)

    @property
    def couple_name(self) -> str:
        first = self.partner1_name or ""
        return f"{first} & {self.partner2_name}" if self.partner2_name else first
