"""Aggregated lines for a batch."""
from fastapi import APIRouter, Depends
from crewhours.api.deps import get_uow
from crewhours.api.schemas.aggregation import AggregationRead
from crewhours.infra.db.uow import UnitOfWork
from crewhours.services.aggregation_service import AggregationService

router = APIRouter(prefix="/batches/{batch_id}/aggregation", tags=["aggregation"])


@router.get("", response_model=AggregationRead)
def aggregate(batch_id: str, uow: UnitOfWork = Depends(get_uow)) -> AggregationRead:
    return AggregationService(uow).aggregate(batch_id)
