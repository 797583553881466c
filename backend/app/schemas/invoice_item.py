"""Invoice item schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class InvoiceItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_id: int
    task_id: int
    description: Optional[str] = None
    hours_billed: Decimal
    rate: Decimal
    amount: Decimal
    created_at: datetime
