from __future__ import annotations

import app.services.lead_service as lead_service_module
from app.api.v1 import matching
from app.models import UserRole


def _create(client, headers, **overrides):
    body = {
        "partner1_name": "Aisha",
        "partner2_name": "Rohan",
        "email": "aisha@example.com",
        "wedding_date": "2026-12-12T00:00:00Z",
        "budget_min": 200000,
        "budget_max": 2000000,
        "service_types": "photography,catering",
        "preferred_locations": ["Udaipur"],
    }
    body.update(overrides)
    response = client.post("/api/v1/leads", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_health_is_public(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_leads_require_auth_and_scope(client, auth_header):
    assert client.get("/api/v1/leads").status_code == 401
    assert client.get("/api/v1/leads", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get("/api/v1/leads", headers=auth_header("v-1", UserRole.VENDOR)).status_code == 403


def test_create_list_and_fetch_lead(client, build, auth_header):
    planner = build.user()
    headers = auth_header(planner.id, UserRole.USER)

    created = _create(client, headers)
    listed = client.get("/api/v1/leads", params={"search": "aisha"}, headers=headers)
    detail = client.get(f"/api/v1/leads/{created['id']}", headers=headers)

    assert created["title"] == "Aisha & Rohan - Wedding"
    assert created["created_by_id"] == planner.id
    assert created["status"] == "INQUIRY"
    assert listed.json()["total"] == 1
    assert detail.status_code == 200
    assert detail.json()["cards"] == []
    assert detail.json()["wedding_plan"] is None


def test_user_cannot_see_other_users_lead(client, build, auth_header):
    owner = build.user()
    stranger = build.user()
    created = _create(client, auth_header(owner.id, UserRole.USER))

    response = client.get(f"/api/v1/leads/{created['id']}", headers=auth_header(stranger.id, UserRole.USER))

    assert response.status_code == 404


def test_user_cannot_bulk_update_other_users_leads(client, build, auth_header):
    owner = build.user()
    stranger = build.user()
    owner_headers = auth_header(owner.id, UserRole.USER)
    created = _create(client, owner_headers)
    body = {"lead_ids": [created["id"]], "status": "BOOKED"}

    denied = client.post("/api/v1/leads/bulk-status", json=body, headers=auth_header(stranger.id, UserRole.USER))
    detail = client.get(f"/api/v1/leads/{created['id']}", headers=owner_headers)
    allowed = client.post("/api/v1/leads/bulk-status", json=body, headers=owner_headers)

    assert denied.status_code == 404
    assert detail.json()["status"] == "INQUIRY"
    assert allowed.json() == {"updated": 1}


def test_invalid_sort_field_is_a_bad_request(client, auth_header):
    response = client.get("/api/v1/leads", params={"sort_by": "password"}, headers=auth_header("admin-1"))
    assert response.status_code == 400


def test_update_lead_schedules_card_sync_and_saves_plan(client, build, auth_header, monkeypatch):
    scheduled = []
    monkeypatch.setattr(lead_service_module, "dispatch_card_sync", lambda lead_id, mapping: scheduled.append((lead_id, mapping)))
    admin = build.user(role=UserRole.ADMIN)
    headers = auth_header(admin.id)
    created = _create(client, headers)

    response = client.patch(
        f"/api/v1/leads/{created['id']}",
        json={
            "budget_range": [500000, 1500000],
            "team_ids_by_vendor": {"vendor-1": ["team-1"]},
            "wedding_plan": {"guests": 200, "events": [{"name": "Sangeet", "date": "2026-12-11T00:00:00Z"}]},
        },
        headers=headers,
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert (body["budget_min"], body["budget_max"]) == (500000, 1500000)
    assert body["wedding_plan"]["guests"] == 200
    assert [event["name"] for event in body["wedding_plan"]["events"]] == ["Sangeet"]
    assert scheduled == [(created["id"], {"vendor-1": ["team-1"]})]


def test_status_bulk_and_archive_routes(client, auth_header):
    headers = auth_header("admin-1")
    first = _create(client, headers)
    second = _create(client, headers, partner1_name="Meera")

    status_response = client.patch(f"/api/v1/leads/{first['id']}/status", json={"status": "PROPOSAL"}, headers=headers)
    bulk = client.post(
        "/api/v1/leads/bulk-status",
        json={"lead_ids": [first["id"], second["id"]], "status": "BOOKED"},
        headers=headers,
    )
    missing = client.post("/api/v1/leads/bulk-status", json={"lead_ids": ["nope"], "status": "BOOKED"}, headers=headers)
    archived = client.patch(f"/api/v1/leads/{second['id']}/archive", json={"archived": True}, headers=headers)

    assert status_response.json()["status"] == "PROPOSAL"
    assert bulk.json() == {"updated": 2}
    assert missing.status_code == 404
    assert archived.json()["save_status"] == "ARCHIVED"
    assert client.get("/api/v1/leads", headers=headers).json()["total"] == 1


def test_board_groups_leads_by_stage(client, auth_header):
    headers = auth_header("admin-1")
    _create(client, headers)

    response = client.get("/api/v1/leads/board", params={"location": "Udaipur"}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert [board["id"] for board in body["boards"]] == ["inquiry", "proposal", "booked", "completed"]
    assert body["boards"][0]["cards"][0]["title"] == "Aisha & Rohan"
    assert body["boards"][0]["cards"][0]["lead_data"]["days_in_stage"] == 0
    assert body["budget_range"] == [200000, 2000000]


def test_matching_and_card_queue_routes(client, build, auth_header, monkeypatch):
    headers = auth_header("admin-1")
    created = _create(client, headers)
    vendor = build.vendor("A Studio", 100_000, 500_000, "photography", teams=1)
    build.vendor("B Luxe", 3_000_000, 5_000_000, "photography", teams=1)

    matched = client.get(f"/api/v1/leads/{created['id']}/matched-vendors", headers=headers)
    assert [item["name"] for item in matched.json()] == ["A Studio"]
    assert matched.json()[0]["match_score"] == 5

    monkeypatch.setattr(matching, "dispatch_card_sync", lambda lead_id, mapping: "task-7")
    queued = client.post(
        f"/api/v1/leads/{created['id']}/vendor-cards",
        json={"team_ids_by_vendor": {vendor.id: [vendor.teams[0].id]}},
        headers=headers,
    )
    assert queued.status_code == 202
    assert queued.json() == {"status": "queued", "task_id": "task-7"}

    monkeypatch.setattr(matching, "dispatch_card_sync", lambda lead_id, mapping: None)
    failed = client.post(
        f"/api/v1/leads/{created['id']}/vendor-cards",
        json={"team_ids_by_vendor": {vendor.id: [vendor.teams[0].id]}},
        headers=headers,
    )
    assert failed.json()["status"] == "dispatch_failed"

    missing = client.get("/api/v1/leads/nope/matched-vendors", headers=headers)
    assert missing.status_code == 404


def test_pipeline_routes(client, build, auth_header):
    planner = build.user(name="Priya")
    headers = auth_header(planner.id, UserRole.USER)
    created = _create(client, headers)

    listed = client.get("/api/v1/pipeline/leads", params={"assignee": "Priya"}, headers=headers)
    moved = client.patch(f"/api/v1/pipeline/leads/{created['id']}/status", json={"status": "BOOKED"}, headers=headers)
    invalid = client.patch(f"/api/v1/pipeline/leads/{created['id']}/status", json={"status": "LOST"}, headers=headers)
    archived = client.delete(f"/api/v1/pipeline/leads/{created['id']}/archive", headers=headers)

    assert [row["couple"] for row in listed.json()] == ["Aisha & Rohan"]
    assert listed.json()[0]["assignee"] == "Priya"
    assert listed.json()[0]["budget"] == 1100000
    assert moved.json()["stage"] == "BOOKED"
    assert invalid.status_code == 400
    assert archived.json()["archived"] is True
