from datetime import date

import pytest
from fastapi.testclient import TestClient

from backend.app.core.exceptions import StateConflictError
from backend.app.core.time import utc_today
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.project import Project
from backend.app.models.task import Task
from backend.app.services.tasks import REBILL_MARKER, advance_invoice_status, mark_rebill_blocked, next_status


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_project(client: TestClient) -> int:
    resp = client.post("/projects/", json={"name": "Website", "rate_type": "hourly", "hourly_rate": "50"})
    assert resp.status_code == 201
    return resp.json()["id"]


def create_task(client: TestClient, project_id: int, **extra) -> dict:
    resp = client.post("/tasks/", json={"project_id": project_id, "title": "Build page", **extra})
    assert resp.status_code == 201
    return resp.json()


def set_status(client: TestClient, task_id: int, status: str, **extra):
    return client.patch(f"/tasks/{task_id}/status", json={"status": status, **extra})


def test_new_task_starts_unstarted_and_uninvoiced():
    client = TestClient(app)
    task = create_task(client, create_project(client))
    assert task["status"] == "todo"
    assert task["invoice_status"] == "not_invoiced"
    assert task["progress_percentage"] == 0
    assert task["created_on"] == utc_today().isoformat()
    assert task["completed_on"] is None


def test_create_task_for_unknown_project_returns_404():
    client = TestClient(app)
    resp = client.post("/tasks/", json={"project_id": 42, "title": "Orphan"})
    assert resp.status_code == 404


def test_progress_defaults_follow_status():
    client = TestClient(app)
    task = create_task(client, create_project(client))

    assert set_status(client, task["id"], "in_progress").json()["progress_percentage"] == 30
    assert set_status(client, task["id"], "review").json()["progress_percentage"] == 80
    held = set_status(client, task["id"], "hold").json()
    assert held["status"] == "hold"
    assert held["progress_percentage"] == 80
    assert set_status(client, task["id"], "in_progress").json()["progress_percentage"] == 30


def test_explicit_progress_overrides_default():
    client = TestClient(app)
    task = create_task(client, create_project(client))
    resp = set_status(client, task["id"], "in_progress", progress_percentage=55)
    assert resp.json()["progress_percentage"] == 55


def test_invalid_status_is_rejected():
    client = TestClient(app)
    task = create_task(client, create_project(client))
    resp = set_status(client, task["id"], "done")
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


def test_completion_is_two_phase():
    client = TestClient(app)
    task = create_task(client, create_project(client), estimated_hours="5")

    direct = set_status(client, task["id"], "completed")
    assert direct.status_code == 400

    request = client.post(f"/tasks/{task['id']}/completion")
    assert request.status_code == 200
    prompt = request.json()
    assert prompt["requires"] == ["hours_worked"]
    assert prompt["current_status"] == "todo"
    assert prompt["suggested_hours"] == "5.00"
    assert client.get(f"/tasks/{task['id']}").json()["status"] == "todo"

    confirmed = client.post(f"/tasks/{task['id']}/completion/confirm", json={"hours_worked": "4"})
    assert confirmed.status_code == 200
    data = confirmed.json()
    assert data["status"] == "completed"
    assert data["progress_percentage"] == 100
    assert data["hours_worked"] == "4.00"
    assert data["completed_on"] is not None

    again = client.post(f"/tasks/{task['id']}/completion")
    assert again.status_code == 409


def test_leaving_completed_clears_completion_date():
    client = TestClient(app)
    task = create_task(client, create_project(client))
    client.post(f"/tasks/{task['id']}/completion/confirm", json={"hours_worked": "2"})

    resp = set_status(client, task["id"], "review")
    data = resp.json()
    assert data["status"] == "review"
    assert data["completed_on"] is None
    assert data["progress_percentage"] == 80


def test_archive_and_restore_round_trip():
    client = TestClient(app)
    task = create_task(client, create_project(client))
    set_status(client, task["id"], "in_progress", progress_percentage=45)

    archived = client.post(f"/tasks/{task['id']}/archive").json()
    assert archived["status"] == "archived"
    assert archived["previous_status"] == "in_progress"
    assert archived["archived_at"] is not None
    assert archived["progress_percentage"] == 45

    assert client.post(f"/tasks/{task['id']}/archive").status_code == 409

    restored = client.post(f"/tasks/{task['id']}/restore").json()
    assert restored["status"] == "in_progress"
    assert restored["previous_status"] is None
    assert restored["archived_at"] is None

    assert client.post(f"/tasks/{task['id']}/restore").status_code == 409

    done = create_task(client, task["project_id"])
    client.post(f"/tasks/{done['id']}/completion/confirm", json={"hours_worked": "2"})
    db = SessionLocal()
    try:
        db.get(Task, done["id"]).completed_on = date(2030, 1, 2)
        db.commit()
    finally:
        db.close()

    parked = client.post(f"/tasks/{done['id']}/archive").json()
    assert parked["completed_on"] == "2030-01-02"
    back = client.post(f"/tasks/{done['id']}/restore").json()
    assert back["status"] == "completed"
    assert back["completed_on"] == "2030-01-02"

    client.post(f"/tasks/{done['id']}/archive")
    reopened = set_status(client, done["id"], "review").json()
    assert reopened["completed_on"] is None


def test_restore_completed_task_keeps_hours():
    client = TestClient(app)
    task = create_task(client, create_project(client))
    client.post(f"/tasks/{task['id']}/completion/confirm", json={"hours_worked": "3"})
    client.post(f"/tasks/{task['id']}/archive")

    restored = client.post(f"/tasks/{task['id']}/restore").json()
    assert restored["status"] == "completed"
    assert restored["hours_worked"] == "3.00"
    assert restored["completed_on"] is not None


def test_list_tasks_filters_by_status():
    client = TestClient(app)
    project_id = create_project(client)
    first = create_task(client, project_id)
    create_task(client, project_id)
    set_status(client, first["id"], "in_progress")

    resp = client.get("/tasks/", params={"project_id": project_id, "status": "in_progress"})
    assert [t["id"] for t in resp.json()] == [first["id"]]


def test_next_status_helper():
    assert next_status("todo") == "in_progress"
    assert next_status("in_progress") == "review"
    assert next_status("review") == "completed"
    assert next_status("hold") == "in_progress"
    assert next_status("completed") == "completed"


def test_invoice_status_only_moves_forward():
    db = SessionLocal()
    try:
        project = Project(name="P", rate_type="hourly", hourly_rate=50)
        db.add(project)
        db.commit()
        task = Task(project_id=project.id, title="T", status="completed", invoice_status="not_invoiced")
        db.add(task)
        db.commit()

        with pytest.raises(StateConflictError):
            advance_invoice_status(task, "invoiced")
        advance_invoice_status(task, "created")
        advance_invoice_status(task, "invoiced")
        with pytest.raises(StateConflictError):
            advance_invoice_status(task, "created")
        advance_invoice_status(task, "paid")
        advance_invoice_status(task, "cancelled")
        assert task.invoice_status == "cancelled"
    finally:
        db.close()


def test_rebill_marker_only_added_once_to_completed_tasks():
    task = Task(title="T", description="Landing page", status="completed")
    mark_rebill_blocked(task)
    mark_rebill_blocked(task)
    assert task.rebill_blocked is True
    assert task.description.count(REBILL_MARKER) == 1

    open_task = Task(title="T", description="", status="review", rebill_blocked=False)
    mark_rebill_blocked(open_task)
    assert open_task.rebill_blocked is False
    assert open_task.description == ""
