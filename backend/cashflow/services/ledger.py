"""Ledger Reader: read-only aggregate queries over expense records.

The engines depend on the ``LedgerReader`` protocol; ``SqlLedgerReader`` is
the SQLAlchemy implementation used by the API.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cashflow.core.numeric import to_money
from cashflow.models.category import Category
from cashflow.models.expense import Expense


@dataclass(frozen=True)
class ExpenseEntry:
    """One expense as seen by the stats engine."""
    amount: Decimal
    date: date
    category_id: int | None = None
    category_name: str | None = None


class LedgerReader(Protocol):
    async def total_for_user(self, user_id: int) -> Decimal: ...

    async def total_for_user_and_category(self, user_id: int, category_id: int) -> Decimal: ...

    async def total_for_user_in_range(self, user_id: int, start: date, end: date) -> Decimal: ...

    async def total_for_user_and_category_in_range(
        self, user_id: int, category_id: int, start: date, end: date
    ) -> Decimal: ...

    async def expenses_for_user_in_range(
        self, user_id: int, start: date, end: date
    ) -> list[ExpenseEntry]: ...

    async def count_for_user_in_range(
        self, user_id: int, start: date, end: date, category_id: int | None = None
    ) -> int: ...


class SqlLedgerReader:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_filters(
        self,
        user_id: int,
        category_id: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ):
        """Return a list of WHERE clauses (reusable). Date bounds are inclusive."""
        clauses = [
            Expense.user_id == user_id,
            Expense.deleted_at.is_(None),
        ]
        if category_id is not None:
            clauses.append(Expense.category_id == category_id)
        if start is not None:
            clauses.append(Expense.expense_date >= start)
        if end is not None:
            clauses.append(Expense.expense_date <= end)
        return clauses

    async def _sum(self, clauses) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Expense.amount), 0)).where(*clauses)
        )
        return to_money(result.scalar())

    async def total_for_user(self, user_id: int) -> Decimal:
        return await self._sum(self._base_filters(user_id))

    async def total_for_user_and_category(self, user_id: int, category_id: int) -> Decimal:
        return await self._sum(self._base_filters(user_id, category_id=category_id))

    async def total_for_user_in_range(self, user_id: int, start: date, end: date) -> Decimal:
        return await self._sum(self._base_filters(user_id, start=start, end=end))

    async def total_for_user_and_category_in_range(
        self, user_id: int, category_id: int, start: date, end: date
    ) -> Decimal:
        return await self._sum(
            self._base_filters(user_id, category_id=category_id, start=start, end=end)
        )

    async def expenses_for_user_in_range(
        self, user_id: int, start: date, end: date
    ) -> list[ExpenseEntry]:
        query = (
            select(
                Expense.amount,
                Expense.expense_date,
                Expense.category_id,
                Category.name.label("category_name"),
            )
            .outerjoin(Category, Expense.category_id == Category.id)
            .where(*self._base_filters(user_id, start=start, end=end))
            .order_by(Expense.expense_date, Expense.id)
        )
        result = await self.db.execute(query)
        return [
            ExpenseEntry(
                amount=to_money(row.amount),
                date=row.expense_date,
                category_id=row.category_id,
                category_name=row.category_name,
            )
            for row in result.all()
        ]

    async def count_for_user_in_range(
        self, user_id: int, start: date, end: date, category_id: int | None = None
    ) -> int:
        result = await self.db.execute(
            select(func.count(Expense.id)).where(
                *self._base_filters(user_id, category_id=category_id, start=start, end=end)
            )
        )
        return result.scalar_one()
