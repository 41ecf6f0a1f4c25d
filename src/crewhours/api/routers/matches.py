"""Match proposal and confirmation endpoints."""
from fastapi import APIRouter, Depends, Query
from crewhours.api.deps import get_uow
from crewhours.api.schemas.matches import ConfirmRequest, ConfirmResult, ProposalList
from crewhours.infra.db.uow import UnitOfWork
from crewhours.services.matching_service import MatchingService

router = APIRouter(prefix="/batches/{batch_id}/matches", tags=["matches"])


@router.get("", response_model=ProposalList)
def propose_matches(
    batch_id: str,
    min_confidence: int | None = Query(None, ge=0, le=100),
    uow: UnitOfWork = Depends(get_uow),
) -> ProposalList:
    return MatchingService(uow).propose_matches(batch_id, min_confidence=min_confidence)


@router.post("/confirm", response_model=ConfirmResult)
def confirm_matches(
    batch_id: str, payload: ConfirmRequest, uow: UnitOfWork = Depends(get_uow),
) -> ConfirmResult:
    return MatchingService(uow).confirm_matches(batch_id, payload)
