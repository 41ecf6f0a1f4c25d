"""Repository for SyncBatch and its ledger rows. Caller owns the transaction."""
from __future__ import annotations
from sqlalchemy import func
from sqlmodel import Session, select
from crewhours.models.core import ConfirmedMatch, LedgerJobRow, SyncBatch


class BatchRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def get_by_id(self, batch_id: str) -> SyncBatch | None:
        return self._s.get(SyncBatch, batch_id)

    def list_all(self, limit: int = 100, offset: int = 0) -> list[SyncBatch]:
        stmt = select(SyncBatch).order_by(SyncBatch.created_at.desc()).offset(offset).limit(limit)
        return list(self._s.exec(stmt).all())

    def count(self) -> int:
        return self._s.exec(select(func.count()).select_from(SyncBatch)).one()

    def create(self, **fields) -> SyncBatch:
        batch = SyncBatch(**fields)
        self._s.add(batch)
        self._s.flush()
        return batch

    # --- ledger rows ---

    def list_ledger_rows(self, batch_id: str) -> list[LedgerJobRow]:
        stmt = (
            select(LedgerJobRow)
            .where(LedgerJobRow.batch_id == batch_id)
            .order_by(LedgerJobRow.row_number)
        )
        return list(self._s.exec(stmt).all())

    def get_ledger_row(self, row_id: int) -> LedgerJobRow | None:
        return self._s.get(LedgerJobRow, row_id)

    def replace_ledger_rows(self, batch_id: str, rows: list[dict]) -> list[LedgerJobRow]:
        """Swap the batch's ledger rows; confirmations pointing at old rows go too."""
        old_rows = self.list_ledger_rows(batch_id)
        old_ids = {row.id for row in old_rows}
        stale = self._s.exec(
            select(ConfirmedMatch).where(ConfirmedMatch.batch_id == batch_id)
        ).all()
        for match in stale:
            if match.ledger_row_id in old_ids:
                self._s.delete(match)
        for row in old_rows:
            self._s.delete(row)
        self._s.flush()
        created = [LedgerJobRow(batch_id=batch_id, **row) for row in rows]
        self._s.add_all(created)
        self._s.flush()
        return created
