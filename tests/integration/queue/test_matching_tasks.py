from __future__ import annotations

from types import SimpleNamespace

from app.models import CardTeam
from app.tasks import matching_tasks, notification_tasks
from app.models.enums import NotificationType, UserRole


def test_card_sync_runs_in_its_own_session(monkeypatch, session, session_ctx, build):
    lead = build.lead()
    vendor = build.vendor("A Studio", 100_000, 500_000, teams=1)
    monkeypatch.setattr(matching_tasks, "get_db_session", session_ctx)

    result = matching_tasks.run_card_sync(lead.id, {vendor.id: [vendor.teams[0].id, "bogus"]}, trace_id="t-1")

    assert result["status"] == "partial"
    assert result["cards_created"] == 1
    assert result["links_created"] == 1
    assert len(result["failures"]) == 1
    assert session.query(CardTeam).count() == 1


def test_card_sync_dispatch_failure_is_swallowed(monkeypatch):
    def _broken_delay(*args, **kwargs):
        raise ConnectionError("broker unreachable")

    monkeypatch.setattr(matching_tasks, "sync_vendor_cards", SimpleNamespace(delay=_broken_delay))

    assert matching_tasks.dispatch_card_sync("lead-1", {"vendor-1": ["team-1"]}) is None


def test_card_sync_dispatch_returns_task_id(monkeypatch):
    queued = []
    monkeypatch.setattr(
        matching_tasks,
        "sync_vendor_cards",
        SimpleNamespace(delay=lambda *args: queued.append(args) or SimpleNamespace(id="task-42")),
    )

    assert matching_tasks.dispatch_card_sync("lead-1", {"vendor-1": ["team-1"]}) == "task-42"
    assert queued == [("lead-1", {"vendor-1": ["team-1"]})]


def test_fan_out_task_writes_rows(monkeypatch, session_ctx, build):
    build.user(role=UserRole.ADMIN)
    owner = build.user()
    monkeypatch.setattr(notification_tasks, "get_db_session", session_ctx)

    written = notification_tasks.run_fan_out("Proposal sent", NotificationType.PROPOSAL_SENT.value, owner.id)

    assert written == 2


def test_fan_out_dispatch_failure_is_swallowed(monkeypatch):
    def _broken_delay(*args, **kwargs):
        raise ConnectionError("broker unreachable")

    monkeypatch.setattr(notification_tasks, "fan_out_notification", SimpleNamespace(delay=_broken_delay))

    assert notification_tasks.dispatch_fan_out("Proposal sent", NotificationType.PROPOSAL_SENT) is None
