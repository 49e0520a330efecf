"""Threshold API routes: limits management and alerts."""

from fastapi import APIRouter, Depends

from cashflow.api.deps import get_alert_service, get_threshold_service
from cashflow.schemas.alert import Alert
from cashflow.schemas.threshold import ThresholdCreate, ThresholdResponse, ThresholdUpdate
from cashflow.services.alert_service import AlertService
from cashflow.services.threshold_service import ThresholdService

router = APIRouter()


@router.post("", response_model=ThresholdResponse, status_code=201)
async def create_threshold(
    data: ThresholdCreate,
    service: ThresholdService = Depends(get_threshold_service),
):
    """Set an overall or category threshold for a user."""
    return await service.create_threshold(data)


@router.get("/alerts/{user_id}", response_model=list[Alert])
async def current_alerts(
    user_id: int,
    alerts: AlertService = Depends(get_alert_service),
):
    """Current warning/breach alerts. Read-only: breach flags are untouched."""
    return await alerts.get_threshold_breached_alerts(user_id)


@router.get("/check/{user_id}", response_model=list[Alert])
async def check_thresholds(
    user_id: int,
    alerts: AlertService = Depends(get_alert_service),
):
    """Evaluate thresholds and update breach flags."""
    return await alerts.check_threshold_breaches(user_id)


@router.get("/user/{user_id}", response_model=list[ThresholdResponse])
async def list_thresholds(
    user_id: int,
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.list_thresholds(user_id)


@router.get("/user/{user_id}/active", response_model=list[ThresholdResponse])
async def list_active_thresholds(
    user_id: int,
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.list_thresholds(user_id, active_only=True)


@router.get("/user/{user_id}/overall", response_model=ThresholdResponse)
async def get_overall_threshold(
    user_id: int,
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.get_overall_threshold(user_id)


@router.get("/user/{user_id}/breached")
async def list_breached_thresholds(
    user_id: int,
    service: ThresholdService = Depends(get_threshold_service),
):
    """Breached thresholds with their count."""
    breached = await service.list_breached(user_id)
    return {"count": await service.count_breached(user_id), "data": breached}


@router.get("/{threshold_id}", response_model=ThresholdResponse)
async def get_threshold(
    threshold_id: int,
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.get_threshold(threshold_id)


@router.patch("/{threshold_id}", response_model=ThresholdResponse)
async def update_threshold(
    threshold_id: int,
    data: ThresholdUpdate,
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.update_threshold(threshold_id, data)


@router.patch("/{threshold_id}/toggle", response_model=ThresholdResponse)
async def toggle_threshold(
    threshold_id: int,
    service: ThresholdService = Depends(get_threshold_service),
):
    """Flip the active flag."""
    return await service.toggle_threshold(threshold_id)


@router.delete("/{threshold_id}", status_code=204)
async def delete_threshold(
    threshold_id: int,
    service: ThresholdService = Depends(get_threshold_service),
):
    await service.delete_threshold(threshold_id)
