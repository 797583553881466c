"""Administrative purge of all billing data."""

import logging

from sqlalchemy.orm import Session

from backend.app.core.exceptions import ValidationError
from backend.app.models.invoice import Invoice
from backend.app.models.invoice_item import InvoiceItem
from backend.app.models.project import Project
from backend.app.models.receivable import Receivable
from backend.app.models.revenue_record import RevenueRecord
from backend.app.models.task import Task
from backend.app.models.tax_payment import TaxPayment

logger = logging.getLogger(__name__)

CONFIRMATION_TEXT = "delete all data"

# Children before parents.
PURGE_ORDER = (
    ("revenue_records", RevenueRecord),
    ("tax_payments", TaxPayment),
    ("receivables", Receivable),
    ("invoice_items", InvoiceItem),
    ("invoices", Invoice),
    ("tasks", Task),
    ("projects", Project),
)


def count_records(db: Session) -> dict[str, int]:
    return {name: db.query(model).count() for name, model in PURGE_ORDER}


def purge_all(db: Session, confirm: str) -> dict[str, int]:
    if (confirm or "").strip().lower() != CONFIRMATION_TEXT:
        raise ValidationError(f"Type '{CONFIRMATION_TEXT}' to confirm the purge")
    deleted = {}
    try:
        for name, model in PURGE_ORDER:
            deleted[name] = db.query(model).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.warning("Purged all billing data: %s", deleted)
    return deleted
