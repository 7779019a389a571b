"""Kanban card model module: the materialized lead/vendor collaboration link."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, Base, IdMixin


class KanbanCard(Base, IdMixin, AuditMixin):
    __tablename__ = "cards"
    __table_args__ = (
        UniqueConstraint("lead_id", "vendor_id", name="uq_cards_lead_vendor"),
        Index("idx_cards_vendor", "vendor_id"),
    )

    lead_id: Mapped[str] = mapped_column(ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    vendor_id: Mapped[str] = mapped_column(ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False)

    lead = relationship("Lead", back_populates="cards")
    vendor = relationship("Vendor")
    card_teams = relationship("CardTeam", back_populates="card", cascade="all, delete-orphan")


class CardTeam(Base, IdMixin, AuditMixin):
    __tablename__ = "card_teams"
    __table_args__ = (UniqueConstraint("card_id", "team_id", name="uq_card_teams_card_team"),)

    card_id: Mapped[str] = mapped_column(ForeignKey("cards.id", ondelete="CASCADE"), nullable=False)
    team_id: Mapped[str] = mapped_column(String(36), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)

    card = relationship("KanbanCard", back_populates="card_teams")
    team = relationship("Team")
