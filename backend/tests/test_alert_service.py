"""Alert engine tests: classification, hysteresis and read-only checks."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi import HTTPException

from cashflow.schemas.alert import AlertType
from cashflow.services.alert_service import AlertService, build_message, classify_usage

DAY = date(2026, 3, 1)


@pytest.fixture
def service(ledger, store, directory, clock):
    return AlertService(ledger, store, directory, clock)


@pytest.mark.parametrize(
    "spending, expected",
    [
        (0, None),
        (750, None),
        (799, None),
        (800, AlertType.WARNING),
        (999, AlertType.WARNING),
        (999.95, AlertType.BREACH),  # ratio rounds to 1.0000
        (1000, AlertType.BREACH),
        (1200, AlertType.BREACH),
    ],
)
@pytest.mark.asyncio
async def test_classification_boundaries(service, store, spending, expected):
    threshold = store.add(limit_amount=1000, alert_percentage=80)
    alert = await service.evaluate_threshold(threshold, spending, persist=False)
    if expected is None:
        assert alert is None
    else:
        assert alert.alert_type is expected


def test_classify_usage_zero_alert_percentage_always_warns():
    assert classify_usage(0, 0) is AlertType.WARNING


@pytest.mark.asyncio
async def test_breach_alert_fields_and_message(service, store, clock):
    threshold = store.add(limit_amount=1000, alert_percentage=80)
    alert = await service.evaluate_threshold(threshold, 1200)

    assert alert.alert_type is AlertType.BREACH
    assert alert.usage_percentage == 120.0
    assert alert.message == "ALERT: You have exceeded your overall expense limit by 20.0%"
    assert alert.created_at == clock.now()
    assert alert.user_id == 1
    assert alert.category_id is None


@pytest.mark.asyncio
async def test_warning_message_names_category(service, store):
    threshold = store.add(limit_amount=200, alert_percentage=50, category_id=10, category_name="Food")
    alert = await service.evaluate_threshold(threshold, 150)

    assert alert.alert_type is AlertType.WARNING
    assert alert.usage_percentage == 75.0
    assert alert.message == "Warning: You have reached 75.0% of your Food expense limit"


def test_message_keeps_display_rounding_separate():
    message = build_message(AlertType.WARNING, None, Decimal("66.67"))
    assert "66.7%" in message


@pytest.mark.asyncio
async def test_breach_sets_flag_once(service, store, clock):
    threshold = store.add(limit_amount=100)
    first_stamp = clock.now()

    await service.evaluate_threshold(threshold, 150)
    stored = store.get(threshold.id)
    assert stored.is_breached is True
    assert stored.last_alert_sent == first_stamp
    assert len(store.saves) == 1

    clock.current = first_stamp + timedelta(hours=2)
    again = await store.active_for_user(1)
    alert = await service.evaluate_threshold(again[0], 180)

    assert alert.alert_type is AlertType.BREACH
    assert store.get(threshold.id).last_alert_sent == first_stamp
    assert len(store.saves) == 1


@pytest.mark.asyncio
async def test_warning_keeps_breach_flag(service, store):
    threshold = store.add(limit_amount=100, alert_percentage=80, is_breached=True)
    alert = await service.evaluate_threshold(threshold, 90)

    assert alert.alert_type is AlertType.WARNING
    assert store.get(threshold.id).is_breached is True
    assert store.saves == []


@pytest.mark.asyncio
async def test_no_alert_resets_breach_flag(service, store, clock):
    threshold = store.add(limit_amount=100, alert_percentage=80, is_breached=True, last_alert_sent=clock.now())
    alert = await service.evaluate_threshold(threshold, 10)

    assert alert is None
    stored = store.get(threshold.id)
    assert stored.is_breached is False
    assert stored.last_alert_sent == clock.now()
    assert len(store.saves) == 1


@pytest.mark.asyncio
async def test_lost_compare_and_set_does_not_restamp(service, store, clock):
    threshold = store.add(limit_amount=100)
    stale_copy = (await store.active_for_user(1))[0]
    await service.evaluate_threshold(threshold, 100)
    original_stamp = store.get(threshold.id).last_alert_sent

    clock.current = clock.current + timedelta(minutes=5)
    await service.evaluate_threshold(stale_copy, 100)

    assert store.get(threshold.id).last_alert_sent == original_stamp


@pytest.mark.parametrize(
    "fields",
    [
        {"limit_amount": 0},
        {"limit_amount": -50},
        {"alert_percentage": 120},
        {"alert_percentage": -1},
    ],
)
@pytest.mark.asyncio
async def test_invalid_threshold_is_skipped(service, store, fields):
    threshold = store.add(is_breached=True, **fields)
    alert = await service.evaluate_threshold(threshold, 5000)

    assert alert is None
    assert store.saves == []


@pytest.mark.asyncio
async def test_check_uses_category_and_overall_spending(service, ledger, store):
    ledger.add(1, 300, DAY, category_id=10, category_name="Food")
    ledger.add(1, 700, DAY, category_id=11, category_name="Rent")
    ledger.add(2, 5000, DAY, category_id=10, category_name="Food")
    store.add(limit_amount=1000, alert_percentage=80)
    store.add(limit_amount=250, category_id=10, category_name="Food")
    store.add(limit_amount=5000, category_id=11, category_name="Rent")

    alerts = await service.check_threshold_breaches(1)

    assert [(a.threshold_id, a.alert_type) for a in alerts] == [
        (1, AlertType.BREACH),
        (2, AlertType.BREACH),
    ]
    assert alerts[1].current_spending == 300
    assert alerts[1].message == "ALERT: You have exceeded your Food expense limit by 20.0%"
    assert store.get(1).is_breached and store.get(2).is_breached
    assert not store.get(3).is_breached


@pytest.mark.asyncio
async def test_check_skips_inactive_thresholds(service, ledger, store):
    ledger.add(1, 500, DAY)
    store.add(limit_amount=100, is_active=False)

    assert await service.check_threshold_breaches(1) == []
    assert store.saves == []


@pytest.mark.asyncio
async def test_current_alerts_are_read_only_and_idempotent(service, ledger, store):
    ledger.add(1, 1500, DAY)
    store.add(limit_amount=1000)
    store.add(limit_amount=10, category_id=10, category_name="Food", is_breached=True)

    first = await service.get_threshold_breached_alerts(1)
    second = await service.get_threshold_breached_alerts(1)

    assert [a.alert_type for a in first] == [AlertType.BREACH]
    assert [a.model_dump() for a in first] == [a.model_dump() for a in second]
    assert store.saves == []
    assert store.get(1).is_breached is False
    assert store.get(2).is_breached is True


@pytest.mark.asyncio
async def test_current_alerts_unknown_user(service, store):
    store.add(user_id=99, limit_amount=10)
    with pytest.raises(HTTPException) as exc_info:
        await service.get_threshold_breached_alerts(99)
    assert exc_info.value.status_code == 404
