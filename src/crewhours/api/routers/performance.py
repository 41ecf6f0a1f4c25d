"""Persist a batch's aggregated hours."""
from fastapi import APIRouter, Depends
from crewhours.api.deps import get_alert_sink, get_uow
from crewhours.api.schemas.performance import SaveRequest, SaveResult
from crewhours.infra.alerts import AlertSink
from crewhours.infra.db.uow import UnitOfWork
from crewhours.services.performance_service import PerformanceService

router = APIRouter(prefix="/batches/{batch_id}/performance", tags=["performance"])


@router.post("", response_model=SaveResult)
def save_performance(
    batch_id: str,
    payload: SaveRequest,
    uow: UnitOfWork = Depends(get_uow),
    sink: AlertSink = Depends(get_alert_sink),
) -> SaveResult:
    return PerformanceService(uow, alert_sink=sink).save(batch_id, payload)
