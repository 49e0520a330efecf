"""Statistics API routes: monthly snapshot and trend series."""

from fastapi import APIRouter, Depends, Query

from cashflow.api.deps import get_clock, get_stats_service
from cashflow.config import settings
from cashflow.core.clock import Clock
from cashflow.schemas.stats import MonthlyStats, MonthlyTrendPoint
from cashflow.services.stats_service import StatsService

router = APIRouter()


@router.get("/monthly/{user_id}", response_model=MonthlyStats)
async def monthly_stats(
    user_id: int,
    year: int | None = Query(None, ge=2, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    clock: Clock = Depends(get_clock),
    service: StatsService = Depends(get_stats_service),
):
    """Monthly statistics; defaults to the current month."""
    today = clock.today()
    return await service.get_monthly_stats(
        user_id,
        year if year is not None else today.year,
        month if month is not None else today.month,
    )


@router.get("/trends/{user_id}", response_model=list[MonthlyTrendPoint])
async def monthly_trends(
    user_id: int,
    months: int = Query(settings.default_trend_months, ge=1, le=settings.max_trend_months),
    category_id: int | None = None,
    service: StatsService = Depends(get_stats_service),
):
    """Totals for the last N months, oldest first, optionally for one category."""
    if category_id is not None:
        return await service.get_monthly_trends_by_category(user_id, months, category_id)
    return await service.get_monthly_trends(user_id, months)
