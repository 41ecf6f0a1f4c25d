"""Repository for raw export lines and confirmed label matches."""
from __future__ import annotations
from sqlmodel import Session, select
from crewhours.models.core import ConfirmedMatch, RawShiftRecord


class RawShiftRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def list_by_batch(self, batch_id: str) -> list[RawShiftRecord]:
        stmt = (
            select(RawShiftRecord)
            .where(RawShiftRecord.batch_id == batch_id)
            .order_by(RawShiftRecord.source_row)
        )
        return list(self._s.exec(stmt).all())

    def count_by_label(self, batch_id: str, job_label: str) -> int:
        stmt = select(RawShiftRecord.id).where(
            RawShiftRecord.batch_id == batch_id, RawShiftRecord.job_label == job_label
        )
        return len(self._s.exec(stmt).all())

    def replace_for_batch(self, batch_id: str, records: list[RawShiftRecord]) -> list[RawShiftRecord]:
        for record in self.list_by_batch(batch_id):
            self._s.delete(record)
        self._s.flush()
        self._s.add_all(records)
        self._s.flush()
        return records


class MatchRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def list_by_batch(self, batch_id: str) -> list[ConfirmedMatch]:
        return list(self._s.exec(select(ConfirmedMatch).where(ConfirmedMatch.batch_id == batch_id)).all())

    def get(self, batch_id: str, job_label: str) -> ConfirmedMatch | None:
        stmt = select(ConfirmedMatch).where(
            ConfirmedMatch.batch_id == batch_id, ConfirmedMatch.job_label == job_label
        )
        return self._s.exec(stmt).first()

    def get_by_ledger_row(self, batch_id: str, ledger_row_id: int) -> ConfirmedMatch | None:
        stmt = select(ConfirmedMatch).where(
            ConfirmedMatch.batch_id == batch_id, ConfirmedMatch.ledger_row_id == ledger_row_id
        )
        return self._s.exec(stmt).first()

    def upsert(self, batch_id: str, job_label: str, ledger_row_id: int | None) -> ConfirmedMatch:
        match = self.get(batch_id, job_label)
        if match is None:
            match = ConfirmedMatch(batch_id=batch_id, job_label=job_label)
        match.ledger_row_id = ledger_row_id
        self._s.add(match)
        self._s.flush()
        return match
