"""Sync batch and ledger endpoints."""
from fastapi import APIRouter, Depends
from crewhours.api.deps import get_uow
from crewhours.api.schemas.batches import (
    BatchCreate, BatchList, BatchRead, LedgerRowList, LedgerRowsReplace,
)
from crewhours.infra.db.uow import UnitOfWork
from crewhours.services.batch_service import BatchService

router = APIRouter(prefix="/batches", tags=["batches"])


@router.post("", response_model=BatchRead, status_code=201)
def create_batch(payload: BatchCreate, uow: UnitOfWork = Depends(get_uow)) -> BatchRead:
    return BatchService(uow).create_batch(payload)


@router.get("", response_model=BatchList)
def list_batches(limit: int = 100, offset: int = 0, uow: UnitOfWork = Depends(get_uow)) -> BatchList:
    return BatchService(uow).list_batches(limit=limit, offset=offset)


@router.get("/{batch_id}", response_model=BatchRead)
def get_batch(batch_id: str, uow: UnitOfWork = Depends(get_uow)) -> BatchRead:
    return BatchService(uow).get_batch(batch_id)


@router.get("/{batch_id}/ledger-rows", response_model=LedgerRowList)
def list_ledger_rows(batch_id: str, uow: UnitOfWork = Depends(get_uow)) -> LedgerRowList:
    return BatchService(uow).list_ledger_rows(batch_id)


@router.put("/{batch_id}/ledger-rows", response_model=LedgerRowList)
def replace_ledger_rows(
    batch_id: str, payload: LedgerRowsReplace, uow: UnitOfWork = Depends(get_uow),
) -> LedgerRowList:
    return BatchService(uow).replace_ledger_rows(batch_id, payload)
