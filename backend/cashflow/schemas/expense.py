"""Expense schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class ExpenseCreate(BaseModel):
    user_id: int
    category_id: int | None = None
    amount: Decimal = Field(gt=0, decimal_places=2)
    expense_date: date
    description: str | None = None


class ExpenseUpdate(BaseModel):
    category_id: int | None = None
    amount: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    expense_date: date | None = None
    description: str | None = None


class ExpenseResponse(BaseModel):
    id: int
    user_id: int
    category_id: int | None = None
    amount: Decimal
    expense_date: date
    description: str | None = None

    model_config = {"from_attributes": True}
