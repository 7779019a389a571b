"""Seed a small demo dataset: staff, vendors with teams, and a handful of leads."""

import logging

from app.core.logging_config import configure_logging
from app.database.db import get_db_session
from app.database.init_db import init_db
from app.models import Team, TeamMember, TeamMembership, User, UserRole, Vendor, VendorService
from app.services.lead_service import Actor, LeadService

logger = logging.getLogger(__name__)

VENDORS = [
    ("Lens & Light Studio", "studio@lenslight.example", "photography,videography", 150000, 900000),
    ("Royal Feast Caterers", "hello@royalfeast.example", "catering", 400000, 4000000),
    ("Marigold Decor", "team@marigold.example", "decoration,florals", 200000, 2500000),
]

LEADS = [
    {"partner1_name": "Aisha", "partner2_name": "Rohan", "budget_range": [800000, 2500000], "service_types": "photography,catering", "preferred_locations": ["Jaipur"]},
    {"partner1_name": "Meera", "partner2_name": "Kabir", "budget_range": [300000, 900000], "service_types": "decoration", "preferred_locations": []},
    {"partner1_name": "Sana", "partner2_name": None, "budget_range": [2000000, 6000000], "service_types": None, "preferred_locations": ["Udaipur", "Goa"]},
]


def seed() -> None:
    with get_db_session() as db:
        if db.query(User).filter(User.email == "admin@mandap.example").first():
            logger.info("seed.skipped", extra={"event": "seed.skipped", "reason": "already seeded"})
            return

        admin = User(name="Agency Admin", email="admin@mandap.example", role=UserRole.ADMIN)
        planner = User(name="Priya Planner", email="priya@mandap.example", role=UserRole.USER)
        db.add_all([admin, planner])

        for name, email, tags, low, high in VENDORS:
            vendor = Vendor(name=name, email=email, service_types=tags, minimum_amount=low, maximum_amount=high)
            team = Team(name=f"{name} Core Team", vendor=vendor)
            member = TeamMember(name=f"{name.split()[0]} Lead", email=f"lead.{email}", vendor=vendor)
            db.add_all([vendor, team, member, TeamMembership(team=team, team_member=member)])
            db.add(VendorService(vendor=vendor, title=f"{name} Signature Package", category=tags.split(",")[0], price=low))
        db.commit()

        service = LeadService(db)
        actor = Actor(user_id=planner.id, role=UserRole.USER)
        for payload in LEADS:
            service.create_lead(payload, actor=actor)

        logger.info(
            "seed.completed",
            extra={"event": "seed.completed", "vendors": len(VENDORS), "leads": len(LEADS)},
        )


if __name__ == "__main__":
    configure_logging()
    init_db()
    seed()
