"""Revenue calculation helpers."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.app.models.revenue_record import RevenueRecord
from backend.app.services.money import quantize_money


def get_ytd_revenue(db: Session, now: datetime | None = None) -> Decimal:
    """Return calendar year-to-date revenue based on recorded payments."""
    now = now or datetime.now(timezone.utc)
    start_of_year = datetime(now.year, 1, 1, tzinfo=timezone.utc)

    total = (
        db.query(func.coalesce(func.sum(RevenueRecord.amount), 0))
        .filter(RevenueRecord.recorded_at >= start_of_year)
        .scalar()
    )

    return quantize_money(total)
