"""Receivable schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ReceivableRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    project_id: int
    invoice_id: Optional[int] = None
    amount: Decimal
    hours_billed: Decimal
    rate_used: Decimal
    status: str
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    original_amount: Optional[Decimal] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime


class ReceivableWithRevenue(ReceivableRead):
    total_revenue: Decimal
    remaining_amount: Decimal
