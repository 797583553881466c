"""Task routes, including the two-step completion protocol."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.models.task import Task
from backend.app.schemas.task import CompletionConfirm, CompletionRequest, TaskCreate, TaskRead, TaskStatusUpdate
from backend.app.services import tasks as task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(task_in: TaskCreate, db: Session = Depends(get_db)):
    return task_service.create_task(
        db,
        project_id=task_in.project_id,
        title=task_in.title,
        description=task_in.description,
        priority=task_in.priority,
        estimated_hours=task_in.estimated_hours,
    )


@router.get("/", response_model=List[TaskRead])
async def list_tasks(
    project_id: int | None = None,
    status: str | None = None,
    invoice_status: str | None = None,
    db: Session = Depends(get_db),
):
    query = db.query(Task)
    if project_id is not None:
        query = query.filter(Task.project_id == project_id)
    if status:
        query = query.filter(Task.status == status)
    if invoice_status:
        query = query.filter(Task.invoice_status == invoice_status)
    return query.order_by(Task.id.asc()).all()


@router.get("/{task_id}", response_model=TaskRead)
async def read_task(task_id: int, db: Session = Depends(get_db)):
    return task_service.get_task(db, task_id)


@router.patch("/{task_id}/status", response_model=TaskRead)
async def update_task_status(task_id: int, payload: TaskStatusUpdate, db: Session = Depends(get_db)):
    return task_service.change_task_status(
        db,
        task_id,
        payload.status,
        hours_worked=payload.hours_worked,
        progress_percentage=payload.progress_percentage,
    )


@router.post("/{task_id}/completion", response_model=CompletionRequest)
async def request_completion(task_id: int, db: Session = Depends(get_db)):
    return task_service.request_completion(db, task_id)


@router.post("/{task_id}/completion/confirm", response_model=TaskRead)
async def confirm_completion(task_id: int, payload: CompletionConfirm, db: Session = Depends(get_db)):
    return task_service.confirm_completion(db, task_id, payload.hours_worked)


@router.post("/{task_id}/archive", response_model=TaskRead)
async def archive_task(task_id: int, db: Session = Depends(get_db)):
    return task_service.archive_task(db, task_id)


@router.post("/{task_id}/restore", response_model=TaskRead)
async def restore_task(task_id: int, db: Session = Depends(get_db)):
    return task_service.restore_task(db, task_id)
