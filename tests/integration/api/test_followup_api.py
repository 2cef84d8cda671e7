from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import app.scheduling.business_hours as business_hours_module
from app.core.config import get_config
from app.services.lead_service import LeadService


def _seed_templates(client):
    for stage, delay in [("checkout_started", 1800), ("subscribed_active", 0), ("subscribed_active", 60)]:
        response = client.post(
            "/api/v1/templates",
            json={"stage": stage, "delay_seconds": delay, "content": "Hi {name}"},
        )
        assert response.status_code == 201


def test_health_and_stage_metadata(client):
    assert client.get("/api/v1/health").json()["status"] == "ok"

    stages = {item["stage"]: item for item in client.get("/api/v1/stages").json()["items"]}
    assert len(stages) == 12
    assert stages["subscribed_active"]["protected_queue"] is True
    assert stages["checkout_started"]["catalog"] == "sales"


def test_invalid_template_offset_is_unprocessable(client):
    response = client.post(
        "/api/v1/templates",
        json={"stage": "checkout_started", "delay_seconds": 999, "content": "x"},
    )
    assert response.status_code == 422
    assert client.get("/api/v1/templates").json()["items"] == []


def test_lead_lifecycle_reconciles_queue(client):
    _seed_templates(client)

    created = client.post("/api/v1/leads", json={"name": "Olga", "stage": "checkout_started"})
    assert created.status_code == 201
    body = created.json()
    lead_id = body["lead"]["id"]
    assert body["queue"]["created"] == 1

    predicted = client.get(f"/api/v1/leads/{lead_id}/predicted-follows").json()
    assert [item["template_key"] for item in predicted["items"]] == ["checkout_started_1800"]

    moved = client.patch(f"/api/v1/leads/{lead_id}/stage", json={"stage": "subscribed_active"})
    assert moved.status_code == 200
    assert moved.json()["queue"] == {"canceled": 1, "created": 2, "skipped": 0, "complete": True, "errors": []}

    queue = client.get(f"/api/v1/leads/{lead_id}/queue").json()["items"]
    assert [item["status"] for item in queue] == ["scheduled", "scheduled", "canceled"]

    count = client.get("/api/v1/queue/templates/subscribed_active_0/scheduled-count").json()
    assert count == {"template_key": "subscribed_active_0", "scheduled": 1}

    stats = client.get("/api/v1/queue/stats").json()
    assert stats["by_status"]["scheduled"] == 2

    deleted = client.delete(f"/api/v1/leads/{lead_id}")
    assert deleted.json() == {"id": lead_id, "canceled": 2}
    assert client.get(f"/api/v1/leads/{lead_id}").status_code == 404


def test_lead_reads_and_validation(client):
    assert client.post("/api/v1/leads", json={"name": "Pia", "stage": "nowhere"}).status_code == 422
    assert client.get("/api/v1/leads/999").status_code == 404

    lead_id = client.post("/api/v1/leads", json={"name": "Pia"}).json()["lead"]["id"]
    patched = client.patch(f"/api/v1/leads/{lead_id}", json={"notes": "prefers mornings"})
    assert patched.json()["notes"] == "prefers mornings"

    counts = client.get("/api/v1/leads/counts").json()["counts"]
    assert counts["captured_form"] == 1
    listed = client.get("/api/v1/leads", params={"stage": "captured_form"}).json()
    assert listed["total"] == 1


def test_template_rules_edit_and_eligible_leads(client):
    _seed_templates(client)
    client.post("/api/v1/leads", json={"name": "Rui", "stage": "checkout_started"})

    rules = client.get("/api/v1/templates/rules", params={"stage": "checkout_started"}).json()
    assert len(rules["rules"]) == 5
    assert [rule["label"] for rule in rules["available"]] == ["D+2", "D+4", "D+7", "D+15"]

    templates = client.get("/api/v1/templates", params={"stage": "checkout_started"}).json()["items"]
    template_id = templates[0]["id"]
    edited = client.patch(f"/api/v1/templates/{template_id}", json={"content": "Still there, {name}?", "active": False})
    assert edited.json()["active"] is False
    assert edited.json()["template_key"] == "checkout_started_1800"

    eligible = client.get(f"/api/v1/templates/{template_id}/eligible-leads").json()
    assert eligible["count"] == 1
    assert client.patch("/api/v1/templates/999", json={"active": True}).status_code == 404


def test_dispatch_endpoint_reports_outcome(client):
    response = client.post("/api/v1/queue/dispatch")
    assert response.status_code == 200
    assert response.json()["action"] == "no_messages"


def test_create_lead_rejects_client_supplied_created_at(client):
    response = client.post(
        "/api/v1/leads",
        json={"name": "Vera", "created_at": "2020-01-01T00:00:00Z"},
    )
    assert response.status_code == 422
    assert client.get("/api/v1/leads").json()["total"] == 0


def test_preview_uses_the_same_business_clock_as_the_queue(client, session_factory, monkeypatch):
    cfg = replace(get_config(), BUSINESS_TIMEZONE="America/Sao_Paulo")
    monkeypatch.setattr(business_hours_module, "get_config", lambda: cfg)
    _seed_templates(client)

    # Tuesday 21:30 UTC is 18:30 in Sao Paulo: closed in UTC, open locally.
    created_at = datetime(2026, 10, 20, 21, 30, tzinfo=timezone.utc)
    session = session_factory()
    lead, result = LeadService(db=session).create_lead(
        {"name": "Teo", "stage": "subscribed_active", "created_at": created_at}
    )
    lead_id = lead.id
    session.close()
    assert result.created == 2

    predicted = client.get(f"/api/v1/leads/{lead_id}/predicted-follows").json()["items"]
    queue = client.get(f"/api/v1/leads/{lead_id}/queue").json()["items"]

    previewed = {item["template_key"]: item for item in predicted}
    queued = {item["template_key"]: item["scheduled_for"] for item in queue}
    assert set(previewed) == set(queued) == {"subscribed_active_0", "subscribed_active_60"}
    for key, scheduled_for in queued.items():
        assert datetime.fromisoformat(previewed[key]["scheduled_adjusted"]) == datetime.fromisoformat(scheduled_for)

    immediate = previewed["subscribed_active_0"]
    assert immediate["is_adjusted"] is False
    assert datetime.fromisoformat(immediate["scheduled_adjusted"]) == created_at
