"""Sync batch and ledger-row use cases."""
from __future__ import annotations
import logging
from crewhours.api.schemas.batches import (
    BatchCreate, BatchList, BatchRead, LedgerRowList, LedgerRowRead, LedgerRowsReplace,
)
from crewhours.domain.exceptions import NotFoundError
from crewhours.infra.db.repositories.batch_repository import BatchRepository
from crewhours.infra.db.uow import UnitOfWork
from crewhours.models.core import SyncBatch

logger = logging.getLogger(__name__)


def require_batch(uow: UnitOfWork, batch_id: str) -> SyncBatch:
    batch = BatchRepository(uow.session).get_by_id(batch_id)
    if batch is None:
        raise NotFoundError(f"Sync batch {batch_id} not found")
    return batch


class BatchService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def create_batch(self, payload: BatchCreate) -> BatchRead:
        with self._uow.atomic("create sync batch") as session:
            batch = BatchRepository(session).create(**payload.model_dump())
        logger.info("Created sync batch %s for branch %s", batch.id, batch.branch_id)
        return BatchRead.model_validate(batch)

    def get_batch(self, batch_id: str) -> BatchRead:
        return BatchRead.model_validate(require_batch(self._uow, batch_id))

    def list_batches(self, limit: int = 100, offset: int = 0) -> BatchList:
        repo = BatchRepository(self._uow.session)
        return BatchList(
            items=[BatchRead.model_validate(b) for b in repo.list_all(limit=limit, offset=offset)],
            total=repo.count(),
        )

    def list_ledger_rows(self, batch_id: str) -> LedgerRowList:
        require_batch(self._uow, batch_id)
        rows = BatchRepository(self._uow.session).list_ledger_rows(batch_id)
        return LedgerRowList(items=[LedgerRowRead.model_validate(r) for r in rows], total=len(rows))

    def replace_ledger_rows(self, batch_id: str, payload: LedgerRowsReplace) -> LedgerRowList:
        """Store the ledger source's rows for this batch, replacing any earlier delivery."""
        batch = require_batch(self._uow, batch_id)
        rows = []
        for row in payload.rows:
            data = row.model_dump()
            if data["branch_id"] is None:
                data["branch_id"] = batch.branch_id
            rows.append(data)
        with self._uow.atomic(f"store ledger rows for batch {batch_id}") as session:
            created = BatchRepository(session).replace_ledger_rows(batch_id, rows)
        logger.info("Stored %d ledger rows for batch %s", len(created), batch_id)
        return LedgerRowList(items=[LedgerRowRead.model_validate(r) for r in created], total=len(created))
