from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import NotFoundError, ValidationError
from app.models import (
    LineItemStatus,
    NotificationType,
    PlanServiceStatus,
    Proposal,
    ProposalStatus,
    UserRole,
    WeddingPlanService,
)
from app.models.proposal import ProposalVersionImmutableError
from app.orchestration.state_machine import InvalidTransitionError
from app.services.proposal_service import NO_STATUS_CHANGE, ProposalService, compute_totals


class RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.calls = []
        self.fail = fail

    def __call__(self, message, notification_type, owner_id):
        self.calls.append((message, notification_type, owner_id))
        if self.fail:
            raise RuntimeError("broker down")


def _service(session, notifier=None):
    return ProposalService(session, notify=notifier or RecordingNotifier())


def _sent_proposal(session, lead, services=None):
    service = _service(session)
    draft = service.save_draft(lead.id, {"services": services or [{"name": "Photography", "price": 45000}]})
    return service.finalize(draft.id)


def test_compute_totals_applies_discount_then_tax():
    totals = compute_totals([(45000, 1)], [], discount=0, taxes_percent=18)
    assert totals.subtotal == 45000
    assert totals.grand_total == pytest.approx(53100)

    mixed = compute_totals([(1000, 2)], [(500, 3)], discount=500, taxes_percent=10)
    assert mixed.subtotal == 3500
    assert mixed.grand_total == pytest.approx(3300)


def test_compute_totals_clamps_discount_larger_than_subtotal():
    totals = compute_totals([(1000, 1)], [], discount=5000, taxes_percent=18)
    assert totals.grand_total == 0


def test_save_draft_creates_with_lead_defaults_and_persists_totals(session, build):
    owner = build.user()
    lead = build.lead(created_by_id=owner.id, email="couple@example.com")

    draft = _service(session).save_draft(
        lead.id,
        {"services": [{"name": "Photography", "price": 45000, "quantity": 1}]},
    )

    assert draft.status == ProposalStatus.DRAFT
    assert draft.reference.startswith("PRP-")
    assert draft.client_name == "Aisha & Rohan"
    assert draft.client_email == "couple@example.com"
    assert draft.taxes_percent == 18
    assert draft.discount == 0
    assert draft.subtotal == 45000
    assert draft.grand_total == pytest.approx(53100)


def test_save_draft_reuses_single_draft_and_replaces_lines(session, build):
    lead = build.lead()
    service = _service(session)

    first = service.save_draft(
        lead.id,
        {
            "services": [{"name": "Decor", "price": 1000, "quantity": 2}, {"name": "Music", "price": 300}],
            "custom_lines": [{"label": "Travel", "unit_price": 500, "quantity": 3}],
        },
    )
    second = service.save_draft(
        lead.id,
        {"services": [{"name": "Catering", "price": 2000}], "discount": 500, "taxes_percent": 10},
    )

    assert first.id == second.id
    assert session.query(Proposal).filter(Proposal.lead_id == lead.id).count() == 1
    assert [item.name for item in second.services] == ["Catering"]
    assert second.custom_lines == []
    assert second.subtotal == 2000
    assert second.grand_total == pytest.approx(1650)


def test_save_draft_without_line_lists_clears_previous_lines(session, build):
    lead = build.lead()
    service = _service(session)
    service.save_draft(
        lead.id,
        {
            "services": [{"name": "Decor", "price": 1000}],
            "custom_lines": [{"label": "Travel", "unit_price": 500}],
        },
    )

    draft = service.save_draft(lead.id, {"title": "Only title"})

    assert draft.title == "Only title"
    assert draft.services == []
    assert draft.custom_lines == []
    assert draft.subtotal == 0
    assert draft.grand_total == 0


def test_save_draft_fills_line_category(session, build):
    lead = build.lead()
    vendor = build.vendor("Lens Co", 1000, 5000)
    catalog = build.vendor_service(vendor, title="Candid", category="Photography")

    draft = _service(session).save_draft(
        lead.id,
        {
            "services": [
                {"name": "Candid", "price": 100, "vendor_service_id": catalog.id},
                {"name": "Mehendi", "price": 50, "category": "Beauty"},
                {"name": "Misc", "price": 10},
            ]
        },
    )

    assert [item.category for item in draft.services] == ["Photography", "Beauty", "Other"]


def test_save_draft_rejects_bad_quantities_and_unknown_lead(session, build):
    lead = build.lead()
    service = _service(session)

    with pytest.raises(ValidationError):
        service.save_draft(lead.id, {"services": [{"name": "Decor", "price": 10, "quantity": 0}]})
    with pytest.raises(NotFoundError):
        service.save_draft("missing", {})


def test_save_draft_snapshots_plan_events_when_not_supplied(session, build):
    lead = build.lead()
    build.plan(lead, events=[("Sangeet", date(2026, 12, 1)), ("Wedding", date(2026, 12, 2))])

    draft = _service(session).save_draft(lead.id, {})

    assert [item["name"] for item in draft.events] == ["Sangeet", "Wedding"]
    assert draft.events[0]["dateISO"].startswith("2026-12-01")
    assert set(draft.events[0]) == {"name", "dateISO", "startTime", "endTime"}

    explicit = _service(session).save_draft(lead.id, {"events": [{"name": "Reception"}]})
    assert explicit.events == [{"name": "Reception"}]

    emptied = _service(session).save_draft(lead.id, {"events": []})
    assert [item["name"] for item in emptied.events] == ["Sangeet", "Wedding"]


def test_database_allows_only_one_draft_per_lead(session, build):
    lead = build.lead()
    session.add(Proposal(lead_id=lead.id, status=ProposalStatus.SENT))
    session.add(Proposal(lead_id=lead.id, status=ProposalStatus.DRAFT))
    session.commit()

    session.add(Proposal(lead_id=lead.id, status=ProposalStatus.DRAFT))
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()


def test_versions_are_append_only_and_limited(session, build):
    lead = build.lead()
    service = _service(session)
    draft = service.save_draft(lead.id, {})

    for index in range(3):
        service.save_version(draft.id, {"n": index}, created_by_id="planner")
    serialized = service.save_version(draft.id)

    detail = service.get_draft(lead.id)
    assert len(detail.versions) == 4
    assert detail.versions[0].id == serialized.id
    assert serialized.snapshot["reference"] == draft.reference

    version = detail.versions[-1]
    version.snapshot = {"tampered": True}
    with pytest.raises(ProposalVersionImmutableError):
        session.commit()
    session.rollback()


def test_get_draft_without_draft_raises(session, build):
    lead = build.lead()
    with pytest.raises(NotFoundError):
        _service(session).get_draft(lead.id)


def test_finalize_sends_and_notifies_owner(session, build):
    owner = build.user()
    lead = build.lead(created_by_id=owner.id)
    notifier = RecordingNotifier()
    service = _service(session, notifier)
    draft = service.save_draft(lead.id, {})

    sent = service.finalize(draft.id)

    assert sent.status == ProposalStatus.SENT
    assert sent.sent_at is not None
    assert notifier.calls[0][1] == NotificationType.PROPOSAL_SENT
    assert notifier.calls[0][2] == owner.id
    assert draft.reference in notifier.calls[0][0]


def test_finalize_rejects_closed_proposal(session, build):
    lead = build.lead()
    proposal = _sent_proposal(session, lead)
    service = _service(session)
    service.update_status(proposal.id, UserRole.USER, "accept")

    with pytest.raises(InvalidTransitionError):
        service.finalize(proposal.id)


def test_view_then_reject_stamps_timestamps(session, build):
    lead = build.lead()
    proposal = _sent_proposal(session, lead)
    notifier = RecordingNotifier()
    service = _service(session, notifier)

    viewed = service.update_status(proposal.id, "user", "view")
    rejected = service.update_status(proposal.id, "user", "reject")

    assert viewed.changed
    assert rejected.proposal.status == ProposalStatus.REJECTED
    assert rejected.proposal.viewed_at is not None
    assert rejected.proposal.rejected_at is not None
    assert [call[1] for call in notifier.calls] == [
        NotificationType.PROPOSAL_VIEWED,
        NotificationType.PROPOSAL_REJECTED,
    ]


def test_non_client_roles_and_illegal_moves_are_no_ops(session, build):
    lead = build.lead()
    notifier = RecordingNotifier()
    service = _service(session, notifier)
    draft = service.save_draft(lead.id, {})

    on_draft = service.update_status(draft.id, "user", "accept")
    assert (on_draft.changed, on_draft.message) == (False, NO_STATUS_CHANGE)

    service.finalize(draft.id)
    by_admin = service.update_status(draft.id, UserRole.ADMIN, "accept")
    assert not by_admin.changed
    assert by_admin.proposal.status == ProposalStatus.SENT

    service.update_status(draft.id, "user", "accept")
    after_close = service.update_status(draft.id, "user", "reject")
    assert not after_close.changed
    assert after_close.proposal.status == ProposalStatus.ACCEPTED
    assert [call[1] for call in notifier.calls] == [
        NotificationType.PROPOSAL_SENT,
        NotificationType.PROPOSAL_ACCEPTED,
    ]


def test_unknown_action_or_role_is_rejected(session, build):
    lead = build.lead()
    proposal = _sent_proposal(session, lead)
    service = _service(session)

    with pytest.raises(ValidationError):
        service.update_status(proposal.id, "user", "approve")
    with pytest.raises(ValidationError):
        service.update_status(proposal.id, "guest", "view")


def test_accept_without_plan_marks_every_pending_line_assigned(session, build):
    lead = build.lead()
    proposal = _sent_proposal(
        session,
        lead,
        [{"name": "Photography", "price": 45000}, {"name": "Decor", "price": 1000}],
    )

    result = _service(session).update_status(proposal.id, "user", "accept")

    assert result.changed
    assert result.proposal.status == ProposalStatus.ACCEPTED
    assert result.proposal.accepted_at is not None
    assert {item.status for item in result.proposal.services} == {LineItemStatus.ASSIGNED}


def test_accept_with_plan_assigns_only_matching_lines(session, build):
    lead = build.lead()
    vendor = build.vendor("A Studio", 100_000, 500_000)
    photo = build.vendor_service(vendor, "Photography")
    decor = build.vendor_service(vendor, "Decor")
    music = build.vendor_service(vendor, "Music")
    build.plan(
        lead,
        services=[(photo.id, PlanServiceStatus.PENDING), (decor.id, PlanServiceStatus.DECLINED)],
    )
    proposal = _sent_proposal(
        session,
        lead,
        [
            {"name": "Photography", "price": 100, "vendor_service_id": photo.id},
            {"name": "Music", "price": 100, "vendor_service_id": music.id},
        ],
    )

    result = _service(session).update_status(proposal.id, "user", "accept")

    statuses = {item.name: item.status for item in result.proposal.services}
    assert statuses == {"Photography": LineItemStatus.ASSIGNED, "Music": LineItemStatus.PENDING}
    plan_statuses = {row.vendor_service_id: row.status for row in session.query(WeddingPlanService).all()}
    assert plan_statuses == {photo.id: PlanServiceStatus.ACCEPTED, decor.id: PlanServiceStatus.DECLINED}


def test_failed_notification_does_not_undo_status_change(session, build):
    lead = build.lead()
    proposal = _sent_proposal(session, lead)

    result = _service(session, RecordingNotifier(fail=True)).update_status(proposal.id, "user", "view")

    session.expire_all()
    assert result.changed
    assert session.get(Proposal, proposal.id).status == ProposalStatus.VIEWED


def test_assign_vendors_applies_each_assignment_independently(session, build):
    lead = build.lead()
    vendor = build.vendor("A Studio", 100_000, 500_000)
    service = _service(session)
    draft = service.save_draft(lead.id, {"services": [{"name": "Photography", "price": 100}, {"name": "Decor", "price": 50}]})
    photo_id, decor_id = (item.id for item in draft.services)

    result = service.assign_vendors(
        draft.id,
        [
            {"service_id": photo_id, "vendor_id": vendor.id},
            {"service_id": "missing", "vendor_id": vendor.id},
            {"service_id": decor_id, "vendor_id": "missing-vendor"},
        ],
    )

    assert result.assigned == [photo_id]
    assert [failure["service_id"] for failure in result.failures] == ["missing", decor_id]
    refreshed = {item.id: item for item in service.get_proposal(draft.id).proposal.services}
    assert refreshed[photo_id].status == LineItemStatus.ASSIGNED
    assert refreshed[photo_id].vendor_id == vendor.id
    assert refreshed[decor_id].status == LineItemStatus.PENDING


def test_list_proposals_filters_by_status_and_search(session, build):
    service = _service(session)
    first = service.save_draft(build.lead(partner1_name="Meera").id, {})
    second = service.save_draft(build.lead(partner1_name="Kabir").id, {})
    service.finalize(second.id)

    assert [item.id for item in service.list_proposals(status=ProposalStatus.DRAFT)] == [first.id]
    assert [item.id for item in service.list_proposals(search="kabir")] == [second.id]
