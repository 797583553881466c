"""Payment (revenue record) schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PaymentCreate(BaseModel):
    amount: Decimal
    notes: Optional[str] = None


class RevenueRecordRead(BaseModel):
    id: int
    receivable_id: int
    amount: Decimal
    notes: Optional[str] = None
    recorded_at: datetime

    model_config = ConfigDict(from_attributes=True)
