"""Vendor, team and vendor catalog model module."""

from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Float, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, Base, IdMixin


class Vendor(Base, IdMixin, AuditMixin):
    __tablename__ = "vendors"
    __table_args__ = (
        UniqueConstraint("email", name="uq_vendors_email"),
        Index("idx_vendors_active_amounts", "is_active", "minimum_amount", "maximum_amount"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    contact_no: Mapped[str | None] = mapped_column(String(40))
    service_types: Mapped[str | None] = mapped_column(Text)
    minimum_amount: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    maximum_amount: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    teams = relationship("Team", back_populates="vendor", cascade="all, delete-orphan")
    team_members = relationship("TeamMember", back_populates="vendor", cascade="all, delete-orphan")
    services = relationship("VendorService", back_populates="vendor", cascade="all, delete-orphan")


class Team(Base, IdMixin, AuditMixin):
    __tablename__ = "teams"
    __table_args__ = (Index("idx_teams_vendor", "vendor_id"),)

    vendor_id: Mapped[str] = mapped_column(ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    vendor = relationship("Vendor", back_populates="teams")
    memberships = relationship("TeamMembership", back_populates="team", cascade="all, delete-orphan")


class TeamMember(Base, IdMixin, AuditMixin):
    __tablename__ = "team_members"
    __table_args__ = (Index("idx_team_members_vendor", "vendor_id"),)

    vendor_id: Mapped[str] = mapped_column(ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320))
    phone: Mapped[str | None] = mapped_column(String(40))
    role: Mapped[str | None] = mapped_column(String(120))

    vendor = relationship("Vendor", back_populates="team_members")
    memberships = relationship("TeamMembership", back_populates="team_member", cascade="all, delete-orphan")


class TeamMembership(Base, IdMixin):
    __tablename__ = "team_memberships"
    __table_args__ = (UniqueConstraint("team_id", "team_member_id", name="uq_team_memberships_pair"),)

    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    team_member_id: Mapped[str] = mapped_column(ForeignKey("team_members.id", ondelete="CASCADE"), nullable=False)

    team = relationship("Team", back_populates="memberships")
    team_member = relationship("TeamMember", back_populates="memberships")


class VendorService(Base, IdMixin, AuditMixin):
    __tablename__ = "vendor_services"
    __table_args__ = (Index("idx_vendor_services_vendor", "vendor_id"),)

    vendor_id: Mapped[str] = mapped_column(ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(120))
    price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    vendor = relationship("Vendor", back_populates="services")
