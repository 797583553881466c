"""Project schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ProjectStatus = Literal["active", "completed", "on_hold"]
Priority = Literal["low", "medium", "high"]
RateType = Literal["hourly", "fixed"]


class ProjectBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    status: ProjectStatus = "active"
    priority: Priority = "medium"
    rate_type: RateType = "hourly"
    hourly_rate: Optional[Decimal] = None
    fixed_rate: Optional[Decimal] = None
    conversion_factor: Decimal = Decimal("1")


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    priority: Optional[Priority] = None
    rate_type: Optional[RateType] = None
    hourly_rate: Optional[Decimal] = None
    fixed_rate: Optional[Decimal] = None
    conversion_factor: Optional[Decimal] = None


class ProjectRead(ProjectBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


class ConvertedAmount(BaseModel):
    project_id: int
    amount: Decimal
    currency: str
    exchange_rate: Decimal
    conversion_factor: Decimal
    display_amount: Decimal
    rate_source: str
