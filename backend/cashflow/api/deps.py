"""Shared API dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cashflow.core.clock import Clock, get_clock
from cashflow.core.database import get_db
from cashflow.services.alert_service import AlertService
from cashflow.services.expense_service import ExpenseService
from cashflow.services.stats_service import StatsService
from cashflow.services.threshold_service import ThresholdService

__all__ = [
    "get_db",
    "get_clock",
    "get_alert_service",
    "get_stats_service",
    "get_threshold_service",
    "get_expense_service",
]


def get_alert_service(
    db: AsyncSession = Depends(get_db), clock: Clock = Depends(get_clock)
) -> AlertService:
    return AlertService.from_session(db, clock)


def get_stats_service(
    db: AsyncSession = Depends(get_db), clock: Clock = Depends(get_clock)
) -> StatsService:
    return StatsService.from_session(db, clock)


def get_threshold_service(db: AsyncSession = Depends(get_db)) -> ThresholdService:
    return ThresholdService(db)


def get_expense_service(
    db: AsyncSession = Depends(get_db), clock: Clock = Depends(get_clock)
) -> ExpenseService:
    return ExpenseService(db, clock)
