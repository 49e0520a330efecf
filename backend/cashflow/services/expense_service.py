"""Expense write service.

Every create or update is followed by a threshold check so breach flags track
the ledger. The alerts produced by that check are not returned to the writer.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from cashflow.core.clock import Clock, SystemClock
from cashflow.core.exceptions import NotFoundError
from cashflow.models.expense import Expense
from cashflow.schemas.expense import ExpenseCreate, ExpenseUpdate
from cashflow.services.alert_service import AlertService
from cashflow.services.directory import SqlDirectory


class ExpenseService:
    def __init__(self, db: AsyncSession, clock: Clock | None = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.directory = SqlDirectory(db)
        self.alerts = AlertService.from_session(db, self.clock)

    async def create_expense(self, data: ExpenseCreate) -> Expense:
        if not await self.directory.user_exists(data.user_id):
            raise NotFoundError("User")
        if data.category_id is not None and not await self.directory.category_exists(data.category_id):
            raise NotFoundError("Category")

        expense = Expense(
            user_id=data.user_id,
            category_id=data.category_id,
            amount=data.amount,
            expense_date=data.expense_date,
            description=data.description,
        )
        self.db.add(expense)
        await self.db.flush()
        await self.db.refresh(expense)

        await self.alerts.check_threshold_breaches(expense.user_id)
        return expense

    async def update_expense(self, expense_id: int, data: ExpenseUpdate) -> Expense:
        expense = await self._get(expense_id)
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("category_id") is not None:
            if not await self.directory.category_exists(update_data["category_id"]):
                raise NotFoundError("Category")
        for key, value in update_data.items():
            if value is None and key in ("amount", "expense_date"):
                continue  # not nullable
            setattr(expense, key, value)
        await self.db.flush()
        await self.db.refresh(expense)

        await self.alerts.check_threshold_breaches(expense.user_id)
        return expense

    async def delete_expense(self, expense_id: int) -> None:
        expense = await self._get(expense_id)
        expense.deleted_at = self.clock.now()
        await self.db.flush()

    async def _get(self, expense_id: int) -> Expense:
        expense = await self.db.get(Expense, expense_id)
        if not expense or expense.deleted_at is not None:
            raise NotFoundError("Expense")
        return expense
