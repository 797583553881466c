"""Task schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TaskStatus = Literal["todo", "in_progress", "review", "completed", "hold", "archived"]
InvoiceStatus = Literal["not_invoiced", "created", "invoiced", "paid", "cancelled"]


class TaskCreate(BaseModel):
    project_id: int
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    priority: Literal["low", "medium", "high"] = "medium"
    estimated_hours: Optional[Decimal] = Field(default=None, ge=0)


class TaskStatusUpdate(BaseModel):
    status: str
    hours_worked: Optional[Decimal] = Field(default=None, ge=0)
    progress_percentage: Optional[int] = Field(default=None, ge=0, le=100)


class CompletionConfirm(BaseModel):
    hours_worked: Decimal = Field(ge=0)


class CompletionRequest(BaseModel):
    task_id: int
    current_status: TaskStatus
    requires: list[str]
    suggested_hours: Optional[Decimal] = None


class TaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    title: str
    description: str
    status: TaskStatus
    priority: str
    hours_worked: Decimal
    estimated_hours: Optional[Decimal] = None
    progress_percentage: int
    invoice_status: InvoiceStatus
    rebill_blocked: bool
    created_on: date
    completed_on: Optional[date] = None
    previous_status: Optional[str] = None
    archived_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
