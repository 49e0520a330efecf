"""Statistics schemas for the monthly dashboard and trend charts."""

from decimal import Decimal

from pydantic import BaseModel


class CategoryBreakdown(BaseModel):
    category_id: int | None
    category_name: str
    amount: Decimal
    percentage: float
    color: str


class DailyBreakdown(BaseModel):
    day: int
    date: str  # ISO yyyy-mm-dd
    amount: Decimal


class MonthlyStats(BaseModel):
    year: int
    month: int
    month_name: str

    # Summary metrics
    total_spent: Decimal
    avg_daily: Decimal
    transaction_count: int
    days_in_month: int

    # Comparison with previous month
    previous_month_total: Decimal
    change_amount: Decimal
    change_percentage: float
    is_increase: bool

    top_category_name: str
    top_category_amount: Decimal

    category_breakdown: list[CategoryBreakdown]
    daily_breakdown: list[DailyBreakdown]


class MonthlyTrendPoint(BaseModel):
    year: int
    month: int
    month_name: str  # "Jan", "Feb", etc.
    total_spent: Decimal
    transaction_count: int
