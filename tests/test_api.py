"""
Tests for the REST API (`api/main.py` and `api/routers/*`).

Runs the app in mock mode against the seeded in-memory store.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from repositories.client import Settings

PREFIX = "/api/v1"


@pytest.fixture
def client(service) -> TestClient:
    return TestClient(create_app(settings=Settings(), service=service))


@pytest.fixture
def failing_client(service_factory) -> TestClient:
    return TestClient(create_app(settings=Settings(), service=service_factory(success_rate=0.0)))


# ============================================================================
# Health
# ============================================================================

def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["mode"] == "mock"


def test_lifespan_runs_heartbeat(service) -> None:
    app = create_app(settings=Settings(), service=service)
    with TestClient(app):
        assert app.state.heartbeat.is_running
    assert not app.state.heartbeat.is_running


# ============================================================================
# Leads
# ============================================================================

def test_list_leads_defaults(client) -> None:
    response = client.get(f"{PREFIX}/leads")
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 20
    assert body["page"] == 1
    assert body["limit"] == 20
    assert [lead["id"] for lead in body["leads"][:3]] == ["l8", "l1", "l12"]


def test_list_leads_filters(client) -> None:
    body = client.get(f"{PREFIX}/leads", params={"status": "won"}).json()
    assert body["total"] == 2
    assert {lead["status"] for lead in body["leads"]} == {"won"}

    body = client.get(f"{PREFIX}/leads", params={"q": "RAMESH"}).json()
    assert [lead["name"] for lead in body["leads"]] == ["Ramesh Kumar"]


def test_list_leads_paging(client) -> None:
    body = client.get(f"{PREFIX}/leads", params={"page": 3, "limit": 8}).json()
    assert body["total"] == 20
    assert len(body["leads"]) == 4

    body = client.get(f"{PREFIX}/leads", params={"page": 4, "limit": 8}).json()
    assert body["leads"] == []


def test_list_leads_rejects_bad_input(client) -> None:
    assert client.get(f"{PREFIX}/leads", params={"status": "pending"}).status_code == 400
    assert client.get(f"{PREFIX}/leads", params={"page": 0}).status_code == 422


def test_get_lead_detail(client) -> None:
    response = client.get(f"{PREFIX}/leads/l3")
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Vijay Pandey"
    assert body["assignee"]["name"] == "Vikram Singh"
    assert body["timeline"][0]["type"] == "visit"
    assert body["scheduled_visit"].startswith("2024-01-20T10:00:00")


def test_get_unknown_lead_is_404(client) -> None:
    response = client.get(f"{PREFIX}/leads/nonexistent")
    assert response.status_code == 404
    assert "nonexistent" in response.json()["detail"]


def test_create_then_update_flow(client) -> None:
    response = client.post(f"{PREFIX}/leads", json={
        "name": "Test User",
        "phone": "919999999999",
        "address": "X",
        "source": "website",
    })
    assert response.status_code == 201
    lead_id = response.json()["id"]

    body = client.get(f"{PREFIX}/leads/{lead_id}").json()
    assert body["status"] == "new"
    assert len(body["timeline"]) == 1

    response = client.put(f"{PREFIX}/leads/{lead_id}", json={"status": "quoted", "quote_amount": 285000})
    assert response.status_code == 200

    body = client.get(f"{PREFIX}/leads/{lead_id}").json()
    assert body["status"] == "quoted"
    assert body["quote_amount"] == 285000
    assert len(body["timeline"]) == 2
    assert body["timeline"][0]["content"] == "Status changed to quoted"


def test_create_lead_validation(client) -> None:
    response = client.post(f"{PREFIX}/leads", json={"name": "A", "phone": "1", "address": "   ", "source": "website"})
    assert response.status_code == 400

    response = client.post(f"{PREFIX}/leads", json={"name": "A", "phone": "1", "address": "B", "source": "billboard"})
    assert response.status_code == 422


def test_update_rejects_unknown_fields(client) -> None:
    response = client.put(f"{PREFIX}/leads/l1", json={"timeline": []})
    assert response.status_code == 422


def test_add_note(client) -> None:
    response = client.post(f"{PREFIX}/leads/l1/notes", json={"content": "Visited showroom"})
    assert response.status_code == 201
    note = response.json()
    assert note["lead_id"] == "l1"

    top = client.get(f"{PREFIX}/leads/l1").json()["timeline"][0]
    assert top["id"] == note["id"]
    assert top["content"] == "Visited showroom"

    assert client.post(f"{PREFIX}/leads/l1/notes", json={"content": " "}).status_code == 400
    assert client.post(f"{PREFIX}/leads/nope/notes", json={"content": "x"}).status_code == 404


def test_export_csv(client) -> None:
    response = client.get(f"{PREFIX}/leads/export.csv", params={"status": "won"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.splitlines()
    assert lines[0] == "Name,Phone,Email,Address,Status,Source,Quote Amount,Created"
    assert len(lines) == 3


# ============================================================================
# WhatsApp
# ============================================================================

def test_whatsapp_send(client) -> None:
    response = client.post(f"{PREFIX}/whatsapp/send", json={
        "to": "919876543210",
        "type": "owner",
        "message": "Call Ramesh back",
        "lead_id": "l1",
    })
    assert response.status_code == 200
    assert response.json() == {"success": True}

    top = client.get(f"{PREFIX}/leads/l1").json()["timeline"][0]
    assert top["type"] == "whatsapp"
    assert top["content"] == 'WhatsApp sent to owner: "Call Ramesh back"'


def test_whatsapp_send_failure_is_502(failing_client) -> None:
    before = failing_client.get(f"{PREFIX}/leads/l1").json()
    response = failing_client.post(f"{PREFIX}/whatsapp/send", json={
        "type": "customer",
        "message": "Namaste",
        "lead_id": "l1",
    })
    assert response.status_code == 502
    assert failing_client.get(f"{PREFIX}/leads/l1").json() == before


def test_whatsapp_template_send(client) -> None:
    response = client.post(f"{PREFIX}/leads/l2/whatsapp/customer")
    assert response.status_code == 200

    top = client.get(f"{PREFIX}/leads/l2").json()["timeline"][0]
    assert top["content"].startswith('WhatsApp sent to customer: "Namaste Sunita Devi!')


# ============================================================================
# Dashboard and users
# ============================================================================

def test_analytics_summary_shape(client) -> None:
    body = client.get(f"{PREFIX}/analytics/summary").json()
    assert set(body) == {"new_leads_24h", "pipeline_total", "pending_followups", "conversions_month"}
    assert body["pipeline_total"] == 16
    assert body["pending_followups"] == 8
    assert body["conversions_month"] == 2


def test_recent_leads(client) -> None:
    body = client.get(f"{PREFIX}/analytics/recent", params={"limit": 3}).json()
    assert [lead["id"] for lead in body] == ["l8", "l1", "l12"]

    assert len(client.get(f"{PREFIX}/analytics/recent").json()) == 5
    assert client.get(f"{PREFIX}/analytics/recent", params={"limit": 0}).status_code == 422


def test_pipeline_and_move(client) -> None:
    columns = client.get(f"{PREFIX}/pipeline").json()["columns"]
    assert [column["label"] for column in columns] == [
        "New", "Contacted", "Survey", "Quoted", "Negotiation", "Won", "Lost",
    ]
    assert sum(column["count"] for column in columns) == 20

    response = client.post(f"{PREFIX}/pipeline/l1/move", json={"status": "contacted"})
    assert response.status_code == 200
    assert response.json()["status"] == "contacted"

    columns = {c["status"]: c for c in client.get(f"{PREFIX}/pipeline").json()["columns"]}
    assert columns["new"]["count"] == 3
    assert columns["contacted"]["count"] == 5

    assert client.post(f"{PREFIX}/pipeline/nope/move", json={"status": "won"}).status_code == 404


def test_calendar_visits(client) -> None:
    body = client.get(f"{PREFIX}/calendar/visits", params={"date": "2024-01-21"}).json()
    assert body["day"] == "2024-01-21"
    assert [lead["id"] for lead in body["visits"]] == ["l10"]
    assert body["visit_dates"] == ["2024-01-20", "2024-01-21", "2024-01-22"]


def test_list_users(client) -> None:
    users = client.get(f"{PREFIX}/users").json()
    assert [user["id"] for user in users] == ["u1", "u2", "u3", "u4"]
    assert users[3]["role"] == "technician"
