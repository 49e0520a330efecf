"""Alert engine: classify thresholds against current spending.

Each active threshold is compared with the user's spending (category-scoped
when the threshold has a category, user-wide otherwise):

- usage >= 100%               -> BREACH
- usage >= alert_percentage   -> WARNING
- otherwise                   -> no alert

The breach flag on a threshold has hysteresis: it is set (and the last-alert
timestamp stamped) once when usage first reaches 100%, stays set while usage
remains at or above 100%, and is cleared only when usage drops below the
warning band as well as below 100%.
"""

from decimal import Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from cashflow.core.clock import Clock, SystemClock
from cashflow.core.exceptions import NotFoundError
from cashflow.core.numeric import HUNDRED, display_percentage, percentage, to_money
from cashflow.schemas.alert import Alert, AlertType
from cashflow.services.directory import Directory, SqlDirectory
from cashflow.services.ledger import LedgerReader, SqlLedgerReader
from cashflow.services.threshold_store import SqlThresholdStore, ThresholdRecord, ThresholdStore

logger = structlog.get_logger()


def classify_usage(usage_percentage: Decimal, alert_percentage: int) -> AlertType | None:
    if usage_percentage >= HUNDRED:
        return AlertType.BREACH
    if usage_percentage >= alert_percentage:
        return AlertType.WARNING
    return None


def is_valid_threshold(threshold: ThresholdRecord) -> bool:
    return (
        threshold.limit_amount is not None
        and threshold.limit_amount > 0
        and threshold.alert_percentage is not None
        and 0 <= threshold.alert_percentage <= 100
    )


def build_message(alert_type: AlertType, category_name: str | None, usage_percentage: Decimal) -> str:
    scope = category_name if category_name is not None else "overall"
    if alert_type is AlertType.BREACH:
        overrun = display_percentage(usage_percentage - HUNDRED)
        return f"ALERT: You have exceeded your {scope} expense limit by {overrun}%"
    return (
        f"Warning: You have reached {display_percentage(usage_percentage)}% "
        f"of your {scope} expense limit"
    )


class AlertService:
    def __init__(
        self,
        ledger: LedgerReader,
        thresholds: ThresholdStore,
        directory: Directory,
        clock: Clock | None = None,
    ):
        self.ledger = ledger
        self.thresholds = thresholds
        self.directory = directory
        self.clock = clock or SystemClock()

    @classmethod
    def from_session(cls, db: AsyncSession, clock: Clock | None = None) -> "AlertService":
        return cls(SqlLedgerReader(db), SqlThresholdStore(db), SqlDirectory(db), clock)

    async def check_threshold_breaches(self, user_id: int) -> list[Alert]:
        """Evaluate every active threshold and update breach flags.

        Runs after each expense write; callers may ignore the returned alerts.
        """
        alerts = []
        for threshold in await self.thresholds.active_for_user(user_id):
            spending = await self.current_spending(threshold)
            alert = await self.evaluate_threshold(threshold, spending)
            if alert is not None:
                alerts.append(alert)
        return alerts

    async def get_threshold_breached_alerts(self, user_id: int) -> list[Alert]:
        """Read-only variant of check_threshold_breaches: never writes."""
        if not await self.directory.user_exists(user_id):
            raise NotFoundError("User")

        alerts = []
        for threshold in await self.thresholds.active_for_user(user_id):
            spending = await self.current_spending(threshold)
            alert = await self.evaluate_threshold(threshold, spending, persist=False)
            if alert is not None:
                alerts.append(alert)
        return alerts

    async def current_spending(self, threshold: ThresholdRecord) -> Decimal:
        # threshold_type is informational; spending is never windowed by it
        if threshold.category_id is not None:
            return await self.ledger.total_for_user_and_category(
                threshold.user_id, threshold.category_id
            )
        return await self.ledger.total_for_user(threshold.user_id)

    async def evaluate_threshold(
        self,
        threshold: ThresholdRecord,
        current_spending: Decimal,
        persist: bool = True,
    ) -> Alert | None:
        """Classify one threshold; with ``persist`` also apply breach hysteresis."""
        if not is_valid_threshold(threshold):
            logger.warning(
                "threshold_skipped_invalid",
                threshold_id=threshold.id,
                limit=str(threshold.limit_amount),
                alert_percentage=threshold.alert_percentage,
            )
            return None

        spending = to_money(current_spending)
        usage = percentage(spending, threshold.limit_amount)
        alert_type = classify_usage(usage, threshold.alert_percentage)

        if persist:
            if alert_type is AlertType.BREACH and not threshold.is_breached:
                await self._mark_breached(threshold, spending)
            elif alert_type is None and threshold.is_breached:
                await self._reset_breach(threshold)

        if alert_type is None:
            return None
        if alert_type is AlertType.WARNING:
            logger.info(
                "threshold_warning",
                user_id=threshold.user_id,
                threshold_id=threshold.id,
                usage_percentage=float(usage),
            )
        return Alert(
            user_id=threshold.user_id,
            threshold_id=threshold.id,
            category_id=threshold.category_id,
            category_name=threshold.category_name,
            alert_type=alert_type,
            message=build_message(alert_type, threshold.category_name, usage),
            limit_amount=threshold.limit_amount,
            current_spending=spending,
            usage_percentage=float(usage),
            created_at=self.clock.now(),
        )

    async def _mark_breached(self, threshold: ThresholdRecord, spending: Decimal) -> None:
        threshold.is_breached = True
        threshold.last_alert_sent = self.clock.now()
        if not await self.thresholds.save(threshold):
            logger.info("threshold_breach_already_recorded", threshold_id=threshold.id)
            return
        logger.warning(
            "threshold_breached",
            user_id=threshold.user_id,
            threshold_id=threshold.id,
            category=threshold.category_name or "overall",
            limit=str(threshold.limit_amount),
            current_spending=str(spending),
        )

    async def _reset_breach(self, threshold: ThresholdRecord) -> None:
        threshold.is_breached = False
        await self.thresholds.save(threshold)
        logger.info("threshold_breach_reset", user_id=threshold.user_id, threshold_id=threshold.id)
