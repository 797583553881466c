from decimal import Decimal

import pytest
import requests
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import engine
from backend.app.main import app
from backend.app.services.exchange_rates import ExchangeRateProvider, get_exchange_rate_provider


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_project(client: TestClient, **overrides):
    payload = {"name": "Website", "rate_type": "hourly", "hourly_rate": "50.00"}
    payload.update(overrides)
    resp = client.post("/projects/", json=payload)
    assert resp.status_code == 201
    return resp.json()


def create_completed_task(client: TestClient, project_id: int, hours: str):
    resp = client.post("/tasks/", json={"project_id": project_id, "title": "Work"})
    assert resp.status_code == 201
    task_id = resp.json()["id"]
    resp = client.post(f"/tasks/{task_id}/completion/confirm", json={"hours_worked": hours})
    assert resp.status_code == 200
    return resp.json()


def test_create_and_read_project():
    client = TestClient(app)
    project = create_project(client)
    assert project["status"] == "active"
    assert project["priority"] == "medium"
    assert Decimal(project["conversion_factor"]) == Decimal("1")

    resp = client.get(f"/projects/{project['id']}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Website"

    listing = client.get("/projects/")
    assert [p["id"] for p in listing.json()] == [project["id"]]


def test_create_project_without_usable_rate_is_rejected():
    client = TestClient(app)
    resp = client.post("/projects/", json={"name": "No rate", "rate_type": "hourly"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"

    resp = client.post("/projects/", json={"name": "No fixed", "rate_type": "fixed", "hourly_rate": "10"})
    assert resp.status_code == 400


def test_update_project_switches_rate_type():
    client = TestClient(app)
    project = create_project(client)

    resp = client.patch(f"/projects/{project['id']}", json={"rate_type": "fixed"})
    assert resp.status_code == 400

    resp = client.patch(f"/projects/{project['id']}", json={"rate_type": "fixed", "fixed_rate": "900.00"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["rate_type"] == "fixed"
    assert Decimal(data["fixed_rate"]) == Decimal("900.00")


def test_unknown_project_returns_404():
    client = TestClient(app)
    resp = client.get("/projects/999")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_billable_tasks_lists_only_completed_uninvoiced_tasks():
    client = TestClient(app)
    project = create_project(client)
    done = create_completed_task(client, project["id"], "2")
    client.post("/tasks/", json={"project_id": project["id"], "title": "Open"})
    invoiced = create_completed_task(client, project["id"], "1")
    client.post(
        "/invoices/",
        json={"project_id": project["id"], "task_ids": [invoiced["id"]], "recipient_email": "c@example.com"},
    )

    resp = client.get(f"/projects/{project['id']}/billable-tasks")
    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()] == [done["id"]]


def test_convert_amount_uses_rate_and_conversion_factor(monkeypatch):
    def unreachable(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr("backend.app.services.exchange_rates.requests.get", unreachable)
    provider = ExchangeRateProvider(url="https://rates.invalid", currency="INR", fallback_rate=Decimal("80"))
    app.dependency_overrides[get_exchange_rate_provider] = lambda: provider
    try:
        client = TestClient(app)
        project = create_project(client, conversion_factor="1.5")
        resp = client.get(f"/projects/{project['id']}/convert", params={"amount": "100.00"})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    data = resp.json()
    assert Decimal(data["display_amount"]) == Decimal("12000.00")
    assert data["currency"] == "INR"
    assert data["rate_source"] == "fallback"
