"""Threshold management service."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cashflow.config import settings
from cashflow.core.exceptions import AlreadyExistsError, NotFoundError
from cashflow.core.numeric import percentage
from cashflow.models.category import Category
from cashflow.models.threshold import Threshold
from cashflow.schemas.threshold import ThresholdCreate, ThresholdResponse, ThresholdUpdate
from cashflow.services.directory import SqlDirectory
from cashflow.services.ledger import SqlLedgerReader


class ThresholdService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.ledger = SqlLedgerReader(db)
        self.directory = SqlDirectory(db)

    async def create_threshold(self, data: ThresholdCreate) -> ThresholdResponse:
        """Set a new overall or category threshold (one of each per user)."""
        if not await self.directory.user_exists(data.user_id):
            raise NotFoundError("User")

        if data.category_id is not None:
            if not await self.directory.category_exists(data.category_id):
                raise NotFoundError("Category")
            if await self._exists(data.user_id, data.category_id):
                raise AlreadyExistsError("Threshold for this category")
        elif await self._exists(data.user_id, None):
            raise AlreadyExistsError("Overall threshold")

        threshold = Threshold(
            user_id=data.user_id,
            category_id=data.category_id,
            limit_amount=data.limit_amount,
            threshold_type=(data.threshold_type.value if data.threshold_type else settings.default_threshold_type),
            alert_percentage=(
                data.alert_percentage
                if data.alert_percentage is not None
                else settings.default_alert_percentage
            ),
            is_active=True,
            is_breached=False,
        )
        self.db.add(threshold)
        await self.db.flush()
        await self.db.refresh(threshold)
        return await self._to_response(threshold)

    async def get_threshold(self, threshold_id: int) -> ThresholdResponse:
        return await self._to_response(await self._get(threshold_id))

    async def list_thresholds(self, user_id: int, active_only: bool = False) -> list[ThresholdResponse]:
        if not await self.directory.user_exists(user_id):
            raise NotFoundError("User")
        query = select(Threshold).where(Threshold.user_id == user_id)
        if active_only:
            query = query.where(Threshold.is_active.is_(True))
        result = await self.db.execute(query.order_by(Threshold.id))
        return [await self._to_response(t) for t in result.scalars().all()]

    async def get_overall_threshold(self, user_id: int) -> ThresholdResponse:
        if not await self.directory.user_exists(user_id):
            raise NotFoundError("User")
        result = await self.db.execute(
            select(Threshold).where(Threshold.user_id == user_id, Threshold.category_id.is_(None))
        )
        threshold = result.scalar_one_or_none()
        if not threshold:
            raise NotFoundError("Overall threshold")
        return await self._to_response(threshold)

    async def list_breached(self, user_id: int) -> list[ThresholdResponse]:
        result = await self.db.execute(
            select(Threshold)
            .where(Threshold.user_id == user_id, Threshold.is_breached.is_(True))
            .order_by(Threshold.id)
        )
        return [await self._to_response(t) for t in result.scalars().all()]

    async def count_breached(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Threshold.id)).where(
                Threshold.user_id == user_id, Threshold.is_breached.is_(True)
            )
        )
        return result.scalar_one()

    async def update_threshold(self, threshold_id: int, data: ThresholdUpdate) -> ThresholdResponse:
        threshold = await self._get(threshold_id)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if "threshold_type" in update_data:
            update_data["threshold_type"] = update_data["threshold_type"].value
        for key, value in update_data.items():
            setattr(threshold, key, value)
        await self.db.flush()
        await self.db.refresh(threshold)
        return await self._to_response(threshold)

    async def toggle_threshold(self, threshold_id: int) -> ThresholdResponse:
        threshold = await self._get(threshold_id)
        threshold.is_active = not threshold.is_active
        await self.db.flush()
        await self.db.refresh(threshold)
        return await self._to_response(threshold)

    async def delete_threshold(self, threshold_id: int) -> None:
        threshold = await self._get(threshold_id)
        await self.db.delete(threshold)
        await self.db.flush()

    async def _get(self, threshold_id: int) -> Threshold:
        threshold = await self.db.get(Threshold, threshold_id)
        if not threshold:
            raise NotFoundError("Threshold")
        return threshold

    async def _exists(self, user_id: int, category_id: int | None) -> bool:
        query = select(Threshold.id).where(Threshold.user_id == user_id)
        if category_id is None:
            query = query.where(Threshold.category_id.is_(None))
        else:
            query = query.where(Threshold.category_id == category_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def _to_response(self, threshold: Threshold) -> ThresholdResponse:
        """Attach current spending, remaining amount and usage."""
        category_name = None
        if threshold.category_id is not None:
            spending = await self.ledger.total_for_user_and_category(threshold.user_id, threshold.category_id)
            category = await self.db.get(Category, threshold.category_id)
            category_name = category.name if category else None
        else:
            spending = await self.ledger.total_for_user(threshold.user_id)

        return ThresholdResponse(
            id=threshold.id,
            user_id=threshold.user_id,
            category_id=threshold.category_id,
            category_name=category_name,
            limit_amount=threshold.limit_amount,
            threshold_type=threshold.threshold_type,
            alert_percentage=threshold.alert_percentage,
            is_active=threshold.is_active,
            is_breached=threshold.is_breached,
            last_alert_sent=threshold.last_alert_sent,
            current_spending=spending,
            remaining_amount=threshold.limit_amount - spending,
            usage_percentage=float(percentage(spending, threshold.limit_amount)),
            created_at=threshold.created_at,
            updated_at=threshold.updated_at,
        )
