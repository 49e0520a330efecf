"""Threshold Store: active thresholds as plain records, breach-state writes."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cashflow.core.numeric import to_money
from cashflow.models.category import Category
from cashflow.models.threshold import Threshold


@dataclass
class ThresholdRecord:
    id: int
    user_id: int
    limit_amount: Decimal
    category_id: int | None = None
    category_name: str | None = None
    threshold_type: str = "MONTHLY"
    alert_percentage: int = 80
    is_active: bool = True
    is_breached: bool = False
    last_alert_sent: datetime | None = None

    @property
    def is_overall(self) -> bool:
        return self.category_id is None


class ThresholdStore(Protocol):
    async def active_for_user(self, user_id: int) -> list[ThresholdRecord]: ...

    async def save(self, threshold: ThresholdRecord) -> bool: ...


class SqlThresholdStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def active_for_user(self, user_id: int) -> list[ThresholdRecord]:
        query = (
            select(Threshold, Category.name.label("category_name"))
            .outerjoin(Category, Threshold.category_id == Category.id)
            .where(Threshold.user_id == user_id, Threshold.is_active.is_(True))
            .order_by(Threshold.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return [to_record(row.Threshold, row.category_name) for row in result.all()]

    async def save(self, threshold: ThresholdRecord) -> bool:
        """Persist the breach flag and last-alert timestamp.

        Compare-and-set on the previous flag value: only one of several
        concurrent evaluations of the same threshold can flip it. Returns
        False when the row was already in the requested state.
        """
        result = await self.db.execute(
            update(Threshold)
            .where(
                Threshold.id == threshold.id,
                Threshold.is_breached.is_(not threshold.is_breached),
            )
            .values(
                is_breached=threshold.is_breached,
                last_alert_sent=threshold.last_alert_sent,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0


def to_record(threshold: Threshold, category_name: str | None = None) -> ThresholdRecord:
    return ThresholdRecord(
        id=threshold.id,
        user_id=threshold.user_id,
        category_id=threshold.category_id,
        category_name=category_name,
        limit_amount=to_money(threshold.limit_amount),
        threshold_type=threshold.threshold_type,
        alert_percentage=threshold.alert_percentage,
        is_active=threshold.is_active,
        is_breached=threshold.is_breached,
        last_alert_sent=threshold.last_alert_sent,
    )
