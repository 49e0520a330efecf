"""SQLAlchemy models."""

from cashflow.models.base import Base
from cashflow.models.category import Category
from cashflow.models.expense import Expense
from cashflow.models.threshold import Threshold, ThresholdType
from cashflow.models.user import User

__all__ = [
    "Base",
    "User",
    "Category",
    "Expense",
    "Threshold",
    "ThresholdType",
]
