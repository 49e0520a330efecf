"""Threshold schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from cashflow.models.threshold import ThresholdType


class ThresholdCreate(BaseModel):
    user_id: int
    category_id: int | None = None  # None = overall threshold
    limit_amount: Decimal = Field(gt=0, decimal_places=2)
    threshold_type: ThresholdType | None = None
    alert_percentage: int | None = Field(default=None, ge=0, le=100)


class ThresholdUpdate(BaseModel):
    limit_amount: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    threshold_type: ThresholdType | None = None
    alert_percentage: int | None = Field(default=None, ge=0, le=100)
    is_active: bool | None = None


class ThresholdResponse(BaseModel):
    id: int
    user_id: int
    category_id: int | None = None
    category_name: str | None = None
    limit_amount: Decimal
    threshold_type: str
    alert_percentage: int
    is_active: bool
    is_breached: bool
    last_alert_sent: datetime | None = None
    current_spending: Decimal
    remaining_amount: Decimal
    usage_percentage: float
    created_at: datetime | None = None
    updated_at: datetime | None = None
