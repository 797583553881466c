"""Invoice builder and draft maintenance."""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.core.exceptions import NotFoundError, StateConflictError, ValidationError
from backend.app.core.settings import get_settings
from backend.app.core.time import utc_today
from backend.app.models.invoice import Invoice
from backend.app.models.invoice_item import InvoiceItem
from backend.app.models.task import Task
from backend.app.services.money import ZERO, quantize_money, to_decimal
from backend.app.services.projects import get_project
from backend.app.services.rates import compute_line_amounts
from backend.app.services.tasks import advance_invoice_status, release_from_draft

logger = logging.getLogger(__name__)

MAX_NUMBER_ATTEMPTS = 5

DRAFT_FIELDS = ("recipient_email", "recipient_name", "tax_amount", "discount_amount", "due_date", "notes")


def get_invoice(db: Session, invoice_id: int) -> Invoice:
    invoice = db.get(Invoice, invoice_id)
    if invoice is None:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


def next_invoice_number(db: Session, issue_date: date) -> str:
    """Next ``PREFIX-YYYY-NNNN`` number for the issue year."""
    prefix = f"{get_settings().invoice_number_prefix}-{issue_date.year}-"
    existing = db.query(Invoice.invoice_number).filter(Invoice.invoice_number.like(f"{prefix}%")).all()
    highest = 0
    for (number,) in existing:
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:04d}"


def recalculate_invoice_totals(invoice: Invoice) -> None:
    total = sum((to_decimal(item.amount) for item in invoice.items), ZERO)
    invoice.total_amount = quantize_money(total)
    invoice.final_amount = quantize_money(
        total + to_decimal(invoice.tax_amount) - to_decimal(invoice.discount_amount)
    )


def _validate_adjustments(tax_amount: Decimal, discount_amount: Decimal) -> None:
    if tax_amount < ZERO:
        raise ValidationError("tax_amount must not be negative")
    if discount_amount < ZERO:
        raise ValidationError("discount_amount must not be negative")


def _load_selected_tasks(db: Session, project_id: int, task_ids: list[int]) -> list[Task]:
    tasks_by_id = {task.id: task for task in db.query(Task).filter(Task.id.in_(task_ids)).all()}
    selected = []
    for task_id in task_ids:
        task = tasks_by_id.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        if task.project_id != project_id:
            raise ValidationError(f"Task {task_id} does not belong to project {project_id}")
        if task.status != "completed":
            raise StateConflictError(f"Task {task_id} is not completed")
        if task.invoice_status != "not_invoiced":
            raise StateConflictError(f"Task {task_id} is already {task.invoice_status}")
        selected.append(task)
    return selected


def _build_draft(
    db: Session,
    project_id: int,
    task_ids: list[int],
    recipient_email: str,
    tax_amount: Decimal,
    discount_amount: Decimal,
    due_date: date | None,
    recipient_name: str | None,
    notes: str | None,
) -> Invoice:
    project = get_project(db, project_id)
    tasks = _load_selected_tasks(db, project_id, task_ids)
    lines = compute_line_amounts(project, [task.hours_worked for task in tasks])

    issue_date = utc_today()
    invoice = Invoice(
        project_id=project.id,
        invoice_number=next_invoice_number(db, issue_date),
        recipient_email=recipient_email,
        recipient_name=recipient_name,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        status="draft",
        issue_date=issue_date,
        due_date=due_date,
        notes=notes,
    )
    for task, line in zip(tasks, lines):
        # A 0.00 receivable can never be paid, so it must never be billed.
        if line.amount <= ZERO:
            raise ValidationError(f"Task {task.id} would be billed {line.amount}; invoice lines must be positive")
        invoice.items.append(
            InvoiceItem(
                task_id=task.id,
                description=task.title,
                hours_billed=line.hours_billed,
                rate=line.rate,
                amount=line.amount,
            )
        )
        advance_invoice_status(task, "created")
    recalculate_invoice_totals(invoice)
    if invoice.final_amount < ZERO:
        raise ValidationError("discount_amount exceeds the invoice total")
    db.add(invoice)
    db.flush()
    return invoice


def create_draft_invoice(
    db: Session,
    project_id: int,
    task_ids: list[int],
    recipient_email: str,
    tax_amount=ZERO,
    discount_amount=ZERO,
    due_date: date | None = None,
    recipient_name: str | None = None,
    notes: str | None = None,
) -> Invoice:
    """Put the selected completed tasks on a new draft invoice."""
    unique_ids = list(dict.fromkeys(task_ids or []))
    if not unique_ids:
        raise ValidationError("No tasks selected")
    tax = quantize_money(tax_amount)
    discount = quantize_money(discount_amount)
    _validate_adjustments(tax, discount)

    for attempt in range(1, MAX_NUMBER_ATTEMPTS + 1):
        try:
            invoice = _build_draft(
                db, project_id, unique_ids, recipient_email, tax, discount, due_date, recipient_name, notes
            )
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if "invoice_number" not in str(exc.orig) or attempt == MAX_NUMBER_ATTEMPTS:
                raise
            logger.warning("Invoice number collision on attempt %s, retrying", attempt)
            continue
        except Exception:
            db.rollback()
            raise
        db.refresh(invoice)
        logger.info(
            "Created draft invoice %s (%s) for project %s with %s tasks, final %s",
            invoice.id,
            invoice.invoice_number,
            project_id,
            len(unique_ids),
            invoice.final_amount,
        )
        return invoice
    raise StateConflictError("Could not allocate a unique invoice number")


def _require_draft(invoice: Invoice) -> None:
    if invoice.status != "draft":
        raise StateConflictError(f"Invoice {invoice.id} is {invoice.status}; only drafts can be changed")


def update_draft_invoice(db: Session, invoice_id: int, changes: dict) -> Invoice:
    invoice = get_invoice(db, invoice_id)
    try:
        _require_draft(invoice)
        for field in DRAFT_FIELDS:
            if field in changes and changes[field] is not None:
                value = changes[field]
                if field in ("tax_amount", "discount_amount"):
                    value = quantize_money(value)
                setattr(invoice, field, value)
        _validate_adjustments(to_decimal(invoice.tax_amount), to_decimal(invoice.discount_amount))
        recalculate_invoice_totals(invoice)
        if invoice.final_amount < ZERO:
            raise ValidationError("discount_amount exceeds the invoice total")
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(invoice)
    return invoice


def delete_draft_invoice(db: Session, invoice_id: int) -> None:
    """Discard a draft; its tasks become billable again."""
    invoice = get_invoice(db, invoice_id)
    try:
        _require_draft(invoice)
        for item in invoice.items:
            release_from_draft(item.task)
        db.delete(invoice)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted draft invoice %s", invoice_id)


def mark_overdue_invoices(db: Session, today: date | None = None) -> list[Invoice]:
    check_date = today or utc_today()
    overdue = (
        db.query(Invoice)
        .filter(Invoice.status == "sent", Invoice.due_date.isnot(None), Invoice.due_date < check_date)
        .all()
    )
    for invoice in overdue:
        invoice.status = "overdue"
    db.commit()
    for invoice in overdue:
        db.refresh(invoice)
    if overdue:
        logger.info("Marked %s invoices overdue", len(overdue))
    return overdue
