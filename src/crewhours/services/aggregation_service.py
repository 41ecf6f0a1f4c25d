"""Roll confirmed raw shifts into aggregated lines for a batch."""
from __future__ import annotations
from crewhours.api.schemas.aggregation import AggregatedLineRead, AggregationRead
from crewhours.api.schemas.matches import UnmatchedLabelRead
from crewhours.config import settings
from crewhours.infra.db.repositories.batch_repository import BatchRepository
from crewhours.infra.db.repositories.raw_shift_repository import MatchRepository, RawShiftRepository
from crewhours.infra.db.uow import UnitOfWork
from crewhours.models.core import LedgerJobRow, RawShiftRecord
from crewhours.reconcile.aggregator import AggregatedLine, AggregationResult, JobRef, aggregate_shifts
from crewhours.services.batch_service import require_batch


def line_read(line: AggregatedLine) -> AggregatedLineRead:
    return AggregatedLineRead(
        job_id=line.job_id,
        job_name=line.job_name,
        display_name=line.display_name,
        special_type=line.special_type.value if line.special_type else None,
        has_special=line.has_special,
        shift_count=line.shift_count,
        regular_hours=line.regular_hours,
        ot_hours=line.ot_hours,
        ot2_hours=line.ot2_hours,
        total_hours=line.total_hours,
        tags=line.tags,
    )


def crew_counts(records: list[RawShiftRecord]) -> dict[str, int]:
    crews: dict[str, set[str]] = {}
    for r in records:
        crews.setdefault(r.job_label, set()).add(r.crew_member_name.strip().lower())
    return {label: len(names) for label, names in crews.items()}


class AggregationService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def compute(self, batch_id: str) -> tuple[AggregationResult, dict[int, LedgerJobRow], list[RawShiftRecord]]:
        """Aggregate the batch; also return ledger rows by id and the raw records."""
        require_batch(self._uow, batch_id)
        session = self._uow.session
        rows = {r.id: r for r in BatchRepository(session).list_ledger_rows(batch_id)}
        confirmed: dict[str, JobRef | None] = {}
        for match in MatchRepository(session).list_by_batch(batch_id):
            row = rows.get(match.ledger_row_id) if match.ledger_row_id is not None else None
            confirmed[match.job_label] = JobRef(id=row.id, job_name=row.job_name) if row else None
        records = RawShiftRepository(session).list_by_batch(batch_id)
        result = aggregate_shifts(records, confirmed, special_hours=settings.SPECIAL_SHIFT_HOURS)
        return result, rows, records

    def aggregate(self, batch_id: str) -> AggregationRead:
        result, _, records = self.compute(batch_id)
        crews = crew_counts(records)
        return AggregationRead(
            batch_id=batch_id,
            lines=[line_read(line) for line in result.lines],
            unmatched=[
                UnmatchedLabelRead(
                    job_label=u.job_label,
                    shift_count=u.shift_count,
                    total_hours=u.total_hours,
                    crew_count=crews.get(u.job_label, 0),
                )
                for u in result.unmatched
            ],
            total=len(result.lines),
        )
