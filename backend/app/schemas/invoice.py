"""Invoice schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from backend.app.schemas.invoice_item import InvoiceItemRead
from backend.app.schemas.receivable import ReceivableRead


class InvoiceCreate(BaseModel):
    project_id: int
    task_ids: List[int] = []
    recipient_email: EmailStr
    recipient_name: Optional[str] = None
    tax_amount: Decimal = Field(default=Decimal("0.00"), ge=0)
    discount_amount: Decimal = Field(default=Decimal("0.00"), ge=0)
    due_date: Optional[date] = None
    notes: Optional[str] = None


class InvoiceUpdate(BaseModel):
    recipient_email: Optional[EmailStr] = None
    recipient_name: Optional[str] = None
    tax_amount: Optional[Decimal] = Field(default=None, ge=0)
    discount_amount: Optional[Decimal] = Field(default=None, ge=0)
    due_date: Optional[date] = None
    notes: Optional[str] = None


class InvoiceCancel(BaseModel):
    reason: Optional[str] = None


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    invoice_number: str
    recipient_email: str
    recipient_name: Optional[str] = None

    status: str
    total_amount: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal

    issue_date: date
    due_date: Optional[date] = None
    sent_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None

    original_total_amount: Optional[Decimal] = None
    original_final_amount: Optional[Decimal] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime

    items: List[InvoiceItemRead] = []


class InvoiceFinalized(BaseModel):
    invoice: InvoiceRead
    receivables: List[ReceivableRead]
