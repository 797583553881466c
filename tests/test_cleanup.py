import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import engine
from backend.app.main import app


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def seed_paid_invoice(client: TestClient) -> None:
    project_id = client.post(
        "/projects/", json={"name": "Website", "rate_type": "hourly", "hourly_rate": "50.00"}
    ).json()["id"]
    task_id = client.post("/tasks/", json={"project_id": project_id, "title": "Work"}).json()["id"]
    client.post(f"/tasks/{task_id}/completion/confirm", json={"hours_worked": "2"})
    invoice = client.post(
        "/invoices/",
        json={"project_id": project_id, "task_ids": [task_id], "recipient_email": "c@example.com"},
    ).json()
    receivable = client.post(f"/invoices/{invoice['id']}/finalize").json()["receivables"][0]
    client.post(f"/receivables/{receivable['id']}/payments", json={"amount": "100.00"})
    client.post("/tax/payments", json={"amount": "15.00"})


def test_counts_report_every_table():
    client = TestClient(app)
    seed_paid_invoice(client)

    resp = client.get("/admin/cleanup/")
    assert resp.status_code == 200
    assert resp.json() == {
        "revenue_records": 1,
        "tax_payments": 1,
        "receivables": 1,
        "invoice_items": 1,
        "invoices": 1,
        "tasks": 1,
        "projects": 1,
    }


def test_purge_requires_confirmation_text():
    client = TestClient(app)
    seed_paid_invoice(client)

    resp = client.post("/admin/cleanup/", json={"confirm": "yes"})
    assert resp.status_code == 400
    assert client.get("/admin/cleanup/").json()["projects"] == 1


def test_purge_deletes_everything():
    client = TestClient(app)
    seed_paid_invoice(client)

    resp = client.post("/admin/cleanup/", json={"confirm": "delete all data"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "purged"
    assert data["deleted"]["invoices"] == 1
    assert all(count == 0 for count in client.get("/admin/cleanup/").json().values())
