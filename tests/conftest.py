from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.models import (
    Base,
    Lead,
    Team,
    User,
    UserRole,
    Vendor,
    VendorService,
    WeddingEvent,
    WeddingPlan,
    WeddingPlanService,
)


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'mandap_test.db'}", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def session_ctx(session_factory):
    @contextmanager
    def _get_db_session():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    return _get_db_session


class Builders:
    """Small persistence helpers for arranging test data."""

    def __init__(self, db) -> None:
        self.db = db

    def _save(self, *rows):
        self.db.add_all(rows)
        self.db.commit()
        for row in rows:
            self.db.refresh(row)
        return rows[0]

    def user(self, role: UserRole = UserRole.USER, name: str | None = None, is_active: bool = True) -> User:
        suffix = uuid.uuid4().hex[:8]
        return self._save(
            User(name=name or f"User {suffix}", email=f"{suffix}@example.com", role=role, is_active=is_active)
        )

    def vendor(
        self,
        name: str,
        minimum_amount: int,
        maximum_amount: int,
        service_types: str | None = None,
        teams: int = 1,
        is_active: bool = True,
    ) -> Vendor:
        vendor = Vendor(
            name=name,
            email=f"{uuid.uuid4().hex[:8]}@vendor.example",
            service_types=service_types,
            minimum_amount=minimum_amount,
            maximum_amount=maximum_amount,
            is_active=is_active,
        )
        for index in range(teams):
            vendor.teams.append(Team(name=f"{name} team {index + 1}"))
        return self._save(vendor)

    def vendor_service(
        self, vendor: Vendor, title: str = "Package", price: float = 10000.0, category: str | None = None
    ) -> VendorService:
        return self._save(VendorService(vendor_id=vendor.id, title=title, price=price, category=category))

    def lead(self, **overrides) -> Lead:
        fields = {
            "partner1_name": "Aisha",
            "partner2_name": "Rohan",
            "budget_min": 200000,
            "budget_max": 2000000,
            "preferred_locations": [],
        }
        fields.update(overrides)
        return self._save(Lead(**fields))

    def plan(self, lead: Lead, services=(), events=()) -> WeddingPlan:
        plan = WeddingPlan(lead_id=lead.id)
        for vendor_service_id, status in services:
            plan.services.append(WeddingPlanService(vendor_service_id=vendor_service_id, status=status))
        for name, day in events:
            plan.events.append(WeddingEvent(name=name, date=datetime.combine(day, datetime.min.time(), tzinfo=timezone.utc)))
        return self._save(plan)


@pytest.fixture
def build(session) -> Builders:
    return Builders(session)
