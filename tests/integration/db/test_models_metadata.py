from __future__ import annotations

from app.models import Base
import app.models  # noqa: F401


def test_modular_model_metadata_contains_target_tables():
    expected = {
        "users",
        "leads",
        "vendors",
        "teams",
        "team_members",
        "team_memberships",
        "vendor_services",
        "cards",
        "card_teams",
        "wedding_plans",
        "wedding_events",
        "wedding_plan_services",
        "proposals",
        "proposal_services",
        "proposal_custom_lines",
        "proposal_versions",
        "notifications",
    }
    assert expected.issubset(set(Base.metadata.tables.keys()))


def test_one_draft_per_lead_index_is_partial():
    index = next(item for item in Base.metadata.tables["proposals"].indexes if item.name == "uq_proposals_lead_draft")
    assert index.unique
    assert "DRAFT" in str(index.dialect_options["postgresql"]["where"])
