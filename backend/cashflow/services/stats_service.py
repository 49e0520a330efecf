"""Stats engine: monthly snapshot and multi-month trend series."""

import calendar
from datetime import date
from decimal import Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from cashflow.config import settings
from cashflow.core.clock import Clock, SystemClock
from cashflow.core.exceptions import NotFoundError, ValidationError
from cashflow.core.numeric import ZERO, divide_money, percentage, to_money
from cashflow.schemas.stats import CategoryBreakdown, DailyBreakdown, MonthlyStats, MonthlyTrendPoint
from cashflow.services.directory import Directory, SqlDirectory
from cashflow.services.ledger import ExpenseEntry, LedgerReader, SqlLedgerReader

logger = structlog.get_logger()

# Pie chart palette, assigned by rank (index mod 10), not by category
CATEGORY_COLORS = (
    "#6366f1", "#8b5cf6", "#ec4899", "#f43f5e", "#f97316",
    "#eab308", "#22c55e", "#14b8a6", "#06b6d4", "#3b82f6",
)
UNCATEGORIZED = "Uncategorized"
NO_TOP_CATEGORY = "-"

# English regardless of process locale
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
MONTH_ABBRS = tuple(name[:3] for name in MONTH_NAMES)

# The previous month of the earliest year must still be a valid date
MIN_YEAR, MAX_YEAR = 2, 9999


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    days = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, days)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def category_color(rank: int) -> str:
    return CATEGORY_COLORS[rank % len(CATEGORY_COLORS)]


def build_category_breakdown(
    expenses: list[ExpenseEntry], total_spent: Decimal
) -> list[CategoryBreakdown]:
    """Group by category name, rank by amount descending.

    Ties keep first-encountered order. Empty when nothing was spent.
    """
    if not expenses or total_spent <= 0:
        return []

    totals: dict[str, Decimal] = {}
    category_ids: dict[str, int | None] = {}
    for expense in expenses:
        name = expense.category_name if expense.category_name is not None else UNCATEGORIZED
        totals[name] = totals.get(name, ZERO) + expense.amount
        if category_ids.get(name) is None:
            category_ids[name] = expense.category_id

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [
        CategoryBreakdown(
            category_id=category_ids[name],
            category_name=name,
            amount=to_money(amount),
            percentage=float(percentage(amount, total_spent)),
            color=category_color(rank),
        )
        for rank, (name, amount) in enumerate(ranked)
    ]


def build_daily_breakdown(expenses: list[ExpenseEntry], year: int, month: int) -> list[DailyBreakdown]:
    """One entry per calendar day of the month, zero-filled."""
    daily: dict[int, Decimal] = {}
    for expense in expenses:
        daily[expense.date.day] = daily.get(expense.date.day, ZERO) + expense.amount

    days_in_month = calendar.monthrange(year, month)[1]
    return [
        DailyBreakdown(
            day=day,
            date=date(year, month, day).isoformat(),
            amount=to_money(daily.get(day, ZERO)),
        )
        for day in range(1, days_in_month + 1)
    ]


class StatsService:
    def __init__(self, ledger: LedgerReader, directory: Directory, clock: Clock | None = None):
        self.ledger = ledger
        self.directory = directory
        self.clock = clock or SystemClock()

    @classmethod
    def from_session(cls, db: AsyncSession, clock: Clock | None = None) -> "StatsService":
        return cls(SqlLedgerReader(db), SqlDirectory(db), clock)

    async def get_monthly_stats(self, user_id: int, year: int, month: int) -> MonthlyStats:
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ValidationError(f"year must be between {MIN_YEAR} and {MAX_YEAR}")
        await self._require_user(user_id)

        start, end = month_bounds(year, month)
        expenses = await self.ledger.expenses_for_user_in_range(user_id, start, end)
        total_spent = to_money(sum((e.amount for e in expenses), ZERO))

        ledger_total = to_money(await self.ledger.total_for_user_in_range(user_id, start, end))
        if ledger_total != total_spent:
            logger.warning(
                "monthly_total_mismatch",
                user_id=user_id,
                year=year,
                month=month,
                summed=str(total_spent),
                ledger=str(ledger_total),
            )

        days_in_month = (end - start).days + 1
        avg_daily = divide_money(total_spent, days_in_month)

        prev_year, prev_month = shift_month(year, month, -1)
        prev_start, prev_end = month_bounds(prev_year, prev_month)
        previous_total = to_money(
            await self.ledger.total_for_user_in_range(user_id, prev_start, prev_end)
        )

        change_amount = total_spent - previous_total
        change_percentage = percentage(change_amount, previous_total)

        category_breakdown = build_category_breakdown(expenses, total_spent)
        top_name, top_amount = NO_TOP_CATEGORY, ZERO
        if category_breakdown:
            top_name = category_breakdown[0].category_name
            top_amount = category_breakdown[0].amount

        return MonthlyStats(
            year=year,
            month=month,
            month_name=MONTH_NAMES[month - 1],
            total_spent=total_spent,
            avg_daily=avg_daily,
            transaction_count=len(expenses),
            days_in_month=days_in_month,
            previous_month_total=previous_total,
            change_amount=change_amount,
            change_percentage=float(change_percentage),
            is_increase=change_amount > 0,
            top_category_name=top_name,
            top_category_amount=top_amount,
            category_breakdown=category_breakdown,
            daily_breakdown=build_daily_breakdown(expenses, year, month),
        )

    async def get_monthly_trends(
        self, user_id: int, months_back: int, category_id: int | None = None
    ) -> list[MonthlyTrendPoint]:
        """``months_back`` points, oldest first, ending at the current month."""
        if not 1 <= months_back <= settings.max_trend_months:
            raise ValidationError(f"months must be between 1 and {settings.max_trend_months}")
        await self._require_user(user_id)
        if category_id is not None and not await self.directory.category_exists(category_id):
            raise NotFoundError("Category")

        today = self.clock.today()
        trends = []
        for offset in range(months_back - 1, -1, -1):
            year, month = shift_month(today.year, today.month, -offset)
            trends.append(await self._trend_point(user_id, year, month, category_id))
        return trends

    async def get_monthly_trends_by_category(
        self, user_id: int, months_back: int, category_id: int
    ) -> list[MonthlyTrendPoint]:
        return await self.get_monthly_trends(user_id, months_back, category_id)

    async def _trend_point(
        self, user_id: int, year: int, month: int, category_id: int | None
    ) -> MonthlyTrendPoint:
        start, end = month_bounds(year, month)
        if category_id is not None:
            total = await self.ledger.total_for_user_and_category_in_range(user_id, category_id, start, end)
        else:
            total = await self.ledger.total_for_user_in_range(user_id, start, end)
        count = await self.ledger.count_for_user_in_range(user_id, start, end, category_id)
        return MonthlyTrendPoint(
            year=year,
            month=month,
            month_name=MONTH_ABBRS[month - 1],
            total_spent=to_money(total),
            transaction_count=count,
        )

    async def _require_user(self, user_id: int) -> None:
        if not await self.directory.user_exists(user_id):
            raise NotFoundError("User")
