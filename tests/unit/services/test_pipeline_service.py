from datetime import date, datetime, timedelta, timezone

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.models import LeadStatus, SaveStatus
from app.models.base import as_utc
from app.services.pipeline_service import (
    BoardFilters,
    PipelineFilters,
    PipelineService,
    days_in_stage,
    pipeline_budget,
)


def _cards(view, board_id):
    board = next(item for item in view.boards if item.id == board_id)
    return [card.lead.partner1_name for card in board.cards]


def test_days_in_stage_counts_whole_days():
    updated = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert days_in_stage(updated, updated + timedelta(days=3, hours=23)) == 3
    assert days_in_stage(updated.replace(tzinfo=None), updated + timedelta(hours=5)) == 0


def test_boards_follow_fixed_layout_and_skip_archived(session, build):
    build.lead(partner1_name="Asha", status=LeadStatus.INQUIRY)
    build.lead(partner1_name="Bela", status=LeadStatus.BOOKED)
    build.lead(partner1_name="Chitra", status=LeadStatus.BOOKED, save_status=SaveStatus.ARCHIVED)

    view = PipelineService(session).get_boards()

    assert [(board.id, board.order) for board in view.boards] == [
        ("inquiry", 0),
        ("proposal", 1),
        ("booked", 2),
        ("completed", 3),
    ]
    assert _cards(view, "inquiry") == ["Asha"]
    assert _cards(view, "booked") == ["Bela"]
    assert _cards(view, "proposal") == []


def test_budget_range_ignores_filters_and_falls_back_to_defaults(session, build):
    service = PipelineService(session)
    assert service.budget_range() == (500_000, 20_000_000)

    build.lead(partner1_name="Asha", budget_min=300_000, budget_max=900_000)
    build.lead(partner1_name="Bela", budget_min=1_000_000, budget_max=4_000_000)

    view = service.get_boards(BoardFilters(search="asha"))

    assert _cards(view, "inquiry") == ["Asha"]
    assert view.budget_range == (300_000, 4_000_000)


def test_location_filter_keeps_leads_open_to_any_location(session, build):
    build.lead(partner1_name="Asha", preferred_locations=["Goa"])
    build.lead(partner1_name="Bela", preferred_locations=["Jaipur"])
    build.lead(partner1_name="Chitra", preferred_locations=[])

    view = PipelineService(session).get_boards(BoardFilters(location="Goa"))

    assert sorted(_cards(view, "inquiry")) == ["Asha", "Chitra"]


def test_date_window_includes_whole_end_day(session, build):
    build.lead(partner1_name="Asha", wedding_date=datetime(2026, 5, 10, 23, 0, tzinfo=timezone.utc))
    service = PipelineService(session)

    inside = service.get_boards(BoardFilters(date_from=date(2026, 5, 10), date_to=date(2026, 5, 10)))
    outside = service.get_boards(BoardFilters(date_to=date(2026, 5, 9)))

    assert _cards(inside, "inquiry") == ["Asha"]
    assert _cards(outside, "inquiry") == []


def test_board_cards_report_days_in_stage(session, build):
    lead = build.lead()
    now = as_utc(lead.updated_at) + timedelta(days=2, hours=1)

    view = PipelineService(session).get_boards(now=now)

    card = view.boards[0].cards[0]
    assert card.board_id == "inquiry"
    assert card.days_in_stage == 2


def test_pipeline_list_filters_by_assignee_and_budget(session, build):
    planner = build.user(name="Priya")
    build.lead(partner1_name="Asha", created_by_id=planner.id, budget=1_500_000)
    build.lead(partner1_name="Bela", budget_min=200_000, budget_max=600_000)
    service = PipelineService(session)

    by_name = service.list_pipeline_leads(PipelineFilters(assignee="Priya"))
    unassigned = service.list_pipeline_leads(PipelineFilters(assignee="Unassigned"))
    everyone = service.list_pipeline_leads(PipelineFilters(assignee="all"))
    rich = service.list_pipeline_leads(PipelineFilters(min_budget=1_000_000))
    modest = service.list_pipeline_leads(PipelineFilters(max_budget=700_000))

    assert [lead.partner1_name for lead in by_name] == ["Asha"]
    assert [lead.partner1_name for lead in unassigned] == ["Bela"]
    assert len(everyone) == 2
    assert [lead.partner1_name for lead in rich] == ["Asha"]
    assert [lead.partner1_name for lead in modest] == ["Bela"]
    assert pipeline_budget(modest[0]) == 400_000


def test_pipeline_updates_validate_input(session, build):
    lead = build.lead()
    service = PipelineService(session)

    assert service.update_pipeline_status(lead.id, "BOOKED").status == LeadStatus.BOOKED
    assert service.update_pipeline_lead(lead.id, {"budget": 900_000}).budget == 900_000
    with pytest.raises(ValidationError):
        service.update_pipeline_status(lead.id, "LOST")
    with pytest.raises(ValidationError):
        service.update_pipeline_lead(lead.id, {"email": "x@example.com"})
    with pytest.raises(NotFoundError):
        service.update_pipeline_status("missing", "BOOKED")

    archived = service.archive_pipeline_lead(lead.id)
    assert archived.save_status == SaveStatus.ARCHIVED
    assert service.list_pipeline_leads() == []
