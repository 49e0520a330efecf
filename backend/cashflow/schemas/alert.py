"""Alert schemas: evaluation outcomes, recomputed on every request."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class AlertType(str, Enum):
    WARNING = "WARNING"
    BREACH = "BREACH"


class Alert(BaseModel):
    user_id: int
    threshold_id: int | None = None
    category_id: int | None = None
    category_name: str | None = None
    alert_type: AlertType
    message: str
    limit_amount: Decimal
    current_spending: Decimal
    usage_percentage: float
    created_at: datetime
