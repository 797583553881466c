"""Task status tracker.

Owns every mutation of ``Task.status`` and ``Task.invoice_status`` so that the
derived fields (progress, completion date, archive metadata) and the billing
order stay consistent no matter which endpoint triggered the change.
"""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from backend.app.core.exceptions import NotFoundError, StateConflictError, ValidationError
from backend.app.core.time import utc_now, utc_today
from backend.app.models.task import INVOICE_STATUSES, TASK_STATUSES, Task
from backend.app.services.money import ZERO, quantize_money, to_decimal
from backend.app.services.projects import get_project

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS = {
    "todo": 0,
    "in_progress": 30,
    "review": 80,
    "completed": 100,
}

NEXT_STATUS = {
    "todo": "in_progress",
    "in_progress": "review",
    "review": "completed",
    "hold": "in_progress",
}

# Forward-only billing order; "cancelled" is reachable from anywhere.
INVOICE_STATUS_FLOW = {
    "not_invoiced": "created",
    "created": "invoiced",
    "invoiced": "paid",
}

REBILL_MARKER = "[INVOICE CANCELLED] To invoice again, create new task."


def get_task(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task", task_id)
    return task


def next_status(status: str) -> str:
    return NEXT_STATUS.get(status, status)


def create_task(
    db: Session,
    project_id: int,
    title: str,
    description: str | None = None,
    priority: str = "medium",
    estimated_hours=None,
) -> Task:
    get_project(db, project_id)
    task = Task(
        project_id=project_id,
        title=title,
        description=description or "",
        priority=priority,
        estimated_hours=estimated_hours,
        status="todo",
        invoice_status="not_invoiced",
        progress_percentage=0,
        hours_worked=ZERO,
        created_on=utc_today(),
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Created task %s in project %s", task.id, project_id)
    return task


def list_billable_tasks(db: Session, project_id: int) -> list[Task]:
    """Completed tasks that have never been put on an invoice."""
    get_project(db, project_id)
    return (
        db.query(Task)
        .filter(
            Task.project_id == project_id,
            Task.status == "completed",
            Task.invoice_status == "not_invoiced",
        )
        .order_by(Task.id.asc())
        .all()
    )


def advance_invoice_status(task: Task, target: str) -> None:
    """Move a task along not_invoiced -> created -> invoiced -> paid, or to cancelled."""
    if target not in INVOICE_STATUSES:
        raise ValidationError(f"Invalid invoice status {target!r}")
    current = task.invoice_status or "not_invoiced"
    if target == "cancelled":
        task.invoice_status = "cancelled"
        return
    if INVOICE_STATUS_FLOW.get(current) != target:
        raise StateConflictError(f"Task {task.id} cannot move from invoice status {current} to {target}")
    task.invoice_status = target


def release_from_draft(task: Task) -> None:
    """Undo the draft reservation of a task when its draft invoice is deleted."""
    if task.invoice_status != "created":
        raise StateConflictError(f"Task {task.id} is not reserved by a draft invoice")
    task.invoice_status = "not_invoiced"


def _validated_hours(hours_worked) -> Decimal:
    hours = to_decimal(hours_worked)
    if hours < ZERO:
        raise ValidationError("hours_worked must not be negative")
    return quantize_money(hours)


def _apply_status(task: Task, new_status: str, hours_worked=None, progress_percentage: int | None = None) -> None:
    if new_status not in TASK_STATUSES:
        raise ValidationError(
            f"Invalid status {new_status!r}. Must be one of: {', '.join(TASK_STATUSES)}"
        )
    if progress_percentage is not None and not 0 <= progress_percentage <= 100:
        raise ValidationError("progress_percentage must be between 0 and 100")

    old_status = task.status
    was_completed = old_status == "completed" or (old_status == "archived" and task.previous_status == "completed")
    if new_status == "archived":
        if old_status == "archived":
            raise StateConflictError(f"Task {task.id} is already archived")
        task.previous_status = old_status
        task.archived_at = utc_now()
    elif old_status == "archived":
        task.previous_status = None
        task.archived_at = None

    if new_status == "completed":
        if hours_worked is None:
            raise ValidationError(
                "hours_worked is required to complete a task; request completion and confirm with hours"
            )
        task.hours_worked = _validated_hours(hours_worked)
        task.progress_percentage = 100
        if task.completed_on is None:
            task.completed_on = utc_today()
    else:
        if hours_worked is not None:
            task.hours_worked = _validated_hours(hours_worked)
        if progress_percentage is not None:
            task.progress_percentage = progress_percentage
        elif new_status in DEFAULT_PROGRESS:
            task.progress_percentage = DEFAULT_PROGRESS[new_status]
        # completed_on survives archiving.
        if was_completed and new_status != "archived" and task.invoice_status == "not_invoiced":
            task.completed_on = None

    task.status = new_status
    logger.info("Task %s status %s -> %s", task.id, old_status, new_status)


def change_task_status(
    db: Session,
    task_id: int,
    new_status: str,
    hours_worked=None,
    progress_percentage: int | None = None,
) -> Task:
    task = get_task(db, task_id)
    try:
        _apply_status(task, new_status, hours_worked=hours_worked, progress_percentage=progress_percentage)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(task)
    return task


def request_completion(db: Session, task_id: int) -> dict:
    """First half of completing a task: report what the caller must supply."""
    task = get_task(db, task_id)
    if task.status == "completed":
        raise StateConflictError(f"Task {task.id} is already completed")
    suggested = task.hours_worked if task.hours_worked and task.hours_worked > ZERO else task.estimated_hours
    return {
        "task_id": task.id,
        "current_status": task.status,
        "requires": ["hours_worked"],
        "suggested_hours": suggested,
    }


def confirm_completion(db: Session, task_id: int, hours_worked) -> Task:
    if hours_worked is None:
        raise ValidationError("hours_worked is required to confirm completion")
    return change_task_status(db, task_id, "completed", hours_worked=hours_worked)


def archive_task(db: Session, task_id: int) -> Task:
    return change_task_status(db, task_id, "archived")


def restore_task(db: Session, task_id: int) -> Task:
    task = get_task(db, task_id)
    if task.status != "archived":
        raise StateConflictError(f"Task {task.id} is not archived")
    target = task.previous_status or "todo"
    hours = task.hours_worked if target == "completed" else None
    return change_task_status(db, task_id, target, hours_worked=hours)


def mark_rebill_blocked(task: Task) -> None:
    """Flag a completed task whose invoice was cancelled; it can never be billed again."""
    if task.status != "completed":
        return
    task.rebill_blocked = True
    if REBILL_MARKER not in (task.description or ""):
        task.description = f"{task.description}\n\n{REBILL_MARKER}" if task.description else REBILL_MARKER
