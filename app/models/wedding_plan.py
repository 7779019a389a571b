"""Wedding plan model module."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, Base, IdMixin
from app.models.enums import PlanServiceStatus


class WeddingPlan(Base, IdMixin, AuditMixin):
    __tablename__ = "wedding_plans"
    __table_args__ = (UniqueConstraint("lead_id", name="uq_wedding_plans_lead"),)

    lead_id: Mapped[str] = mapped_column(ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    total_budget: Mapped[int | None] = mapped_column(BigInteger)
    guests: Mapped[int | None] = mapped_column(Integer)

    lead = relationship("Lead", back_populates="wedding_plan")
    events = relationship(
        "WeddingEvent",
        back_populates="wedding_plan",
        cascade="all, delete-orphan",
        order_by="WeddingEvent.date",
    )
    services = relationship("WeddingPlanService", back_populates="wedding_plan", cascade="all, delete-orphan")


class WeddingEvent(Base, IdMixin, AuditMixin):
    __tablename__ = "wedding_events"
    __table_args__ = (Index("idx_wedding_events_plan", "wedding_plan_id"),)

    wedding_plan_id: Mapped[str] = mapped_column(ForeignKey("wedding_plans.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    start_time: Mapped[str | None] = mapped_column(String(20))
    end_time: Mapped[str | None] = mapped_column(String(20))

    wedding_plan = relationship("WeddingPlan", back_populates="events")


class WeddingPlanService(Base, IdMixin, AuditMixin):
    __tablename__ = "wedding_plan_services"
    __table_args__ = (Index("idx_wedding_plan_services_plan_status", "wedding_plan_id", "status"),)

    wedding_plan_id: Mapped[str] = mapped_column(ForeignKey("wedding_plans.id", ondelete="CASCADE"), nullable=False)
    vendor_service_id: Mapped[str | None] = mapped_column(ForeignKey("vendor_services.id", ondelete="SET NULL"))
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    status: Mapped[PlanServiceStatus] = mapped_column(
        Enum(PlanServiceStatus), default=PlanServiceStatus.PENDING, nullable=False
    )

    wedding_plan = relationship("WeddingPlan", back_populates="services")
    vendor_service = relationship("VendorService")
