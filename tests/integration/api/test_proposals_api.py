from __future__ import annotations

import pytest

import app.services.proposal_service as proposal_service_module
from app.models import NotificationType, UserRole
from app.services.notification_service import NotificationService


@pytest.fixture
def sent_notifications(monkeypatch):
    calls = []
    monkeypatch.setattr(
        proposal_service_module,
        "dispatch_fan_out",
        lambda message, notification_type, owner_id=None: calls.append((notification_type, owner_id)),
    )
    return calls


def _draft(client, headers, lead_id, services=None):
    response = client.post(
        f"/api/v1/proposals/draft/{lead_id}",
        json={"services": services or [{"name": "Photography", "price": 45000, "quantity": 1}]},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()


def test_draft_versions_and_finalize(client, build, auth_header, sent_notifications):
    owner = build.user()
    lead = build.lead(created_by_id=owner.id)
    headers = auth_header("admin-1")

    draft = _draft(client, headers, lead.id)
    again = _draft(client, headers, lead.id)
    version = client.post(f"/api/v1/proposals/{draft['id']}/versions", json={}, headers=headers)
    detail = client.get(f"/api/v1/proposals/draft/{lead.id}", headers=headers)
    finalized = client.post(f"/api/v1/proposals/{draft['id']}/finalize", headers=headers)

    assert draft["status"] == "DRAFT"
    assert draft["taxes_percent"] == 18
    assert draft["grand_total"] == pytest.approx(53100)
    assert again["id"] == draft["id"]
    assert version.status_code == 201
    assert version.json()["created_by_id"] == "admin-1"
    assert [item["id"] for item in detail.json()["versions"]] == [version.json()["id"]]
    assert finalized.json()["status"] == "SENT"
    assert finalized.json()["sent_at"] is not None
    assert sent_notifications == [(NotificationType.PROPOSAL_SENT, owner.id)]


def test_client_accepts_and_closed_proposal_cannot_be_resent(client, build, auth_header, sent_notifications):
    lead = build.lead()
    admin = auth_header("admin-1")
    client_user = auth_header("client-1", UserRole.USER)
    draft = _draft(client, admin, lead.id)
    client.post(f"/api/v1/proposals/{draft['id']}/finalize", headers=admin)

    by_admin = client.post(f"/api/v1/proposals/{draft['id']}/status", json={"action": "accept"}, headers=admin)
    accepted = client.post(f"/api/v1/proposals/{draft['id']}/status", json={"action": "accept"}, headers=client_user)
    bad_action = client.post(f"/api/v1/proposals/{draft['id']}/status", json={"action": "approve"}, headers=client_user)
    resend = client.post(f"/api/v1/proposals/{draft['id']}/finalize", headers=admin)

    assert by_admin.json()["changed"] is False
    assert by_admin.json()["message"] == "No status change required"
    assert accepted.json()["changed"] is True
    assert accepted.json()["proposal"]["status"] == "ACCEPTED"
    assert [item["status"] for item in accepted.json()["proposal"]["services"]] == ["ASSIGNED"]
    assert bad_action.status_code == 400
    assert resend.status_code == 409
    assert [call[0] for call in sent_notifications] == [
        NotificationType.PROPOSAL_SENT,
        NotificationType.PROPOSAL_ACCEPTED,
    ]


def test_assign_vendors_reports_partial_failures(client, build, auth_header, sent_notifications):
    lead = build.lead()
    vendor = build.vendor("A Studio", 100_000, 500_000)
    headers = auth_header("admin-1")
    draft = _draft(client, headers, lead.id)
    line_id = draft["services"][0]["id"]

    response = client.post(
        f"/api/v1/proposals/{draft['id']}/assign-vendors",
        json={
            "assignments": [
                {"service_id": line_id, "vendor_id": vendor.id},
                {"service_id": "missing", "vendor_id": vendor.id},
            ]
        },
        headers=headers,
    )

    assert response.status_code == 200
    assert response.json()["assigned"] == [line_id]
    assert [failure["service_id"] for failure in response.json()["failures"]] == ["missing"]


def test_list_and_missing_proposals(client, build, auth_header, sent_notifications):
    headers = auth_header("admin-1")
    draft = _draft(client, headers, build.lead().id)

    listed = client.get("/api/v1/proposals", params={"status": "DRAFT"}, headers=headers)
    missing = client.get("/api/v1/proposals/nope", headers=headers)
    no_lead = client.post("/api/v1/proposals/draft/nope", json={}, headers=headers)

    assert [item["id"] for item in listed.json()] == [draft["id"]]
    assert missing.status_code == 404
    assert no_lead.status_code == 404


def test_vendor_cannot_write_proposals(client, build, auth_header):
    lead = build.lead()
    response = client.post(f"/api/v1/proposals/draft/{lead.id}", json={}, headers=auth_header("v-1", UserRole.VENDOR))
    assert response.status_code == 403


def test_notifications_are_scoped_to_caller(client, session, build, auth_header):
    owner = build.user()
    other = build.user()
    service = NotificationService(session)
    service.send_notification("Proposal PRP-1 was viewed", NotificationType.PROPOSAL_VIEWED, owner.id, "user")
    service.send_notification("Proposal PRP-2 was viewed", NotificationType.PROPOSAL_VIEWED, other.id, "user")

    response = client.get("/api/v1/notifications", headers=auth_header(owner.id, UserRole.USER))

    assert response.status_code == 200
    assert [row["message"] for row in response.json()] == ["Proposal PRP-1 was viewed"]
