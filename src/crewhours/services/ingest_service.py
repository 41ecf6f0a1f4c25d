"""Time-clock export ingestion."""
from __future__ import annotations
import logging
from dataclasses import asdict
from uuid import uuid4
from crewhours.api.schemas.exports import IngestResult, RawShiftRead
from crewhours.domain.exceptions import ValidationError
from crewhours.infra.db.repositories.raw_shift_repository import RawShiftRepository
from crewhours.infra.db.uow import UnitOfWork
from crewhours.models.core import RawShiftRecord
from crewhours.reconcile.export_parser import parse_export
from crewhours.services.batch_service import require_batch

logger = logging.getLogger(__name__)


class IngestService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def ingest_export(self, batch_id: str, buffer: bytes, filename: str | None = None) -> IngestResult:
        """Parse an export and make it the batch's raw shift set.

        Parsing happens before any write, so an EmptyExportError leaves the
        previous upload in place.
        """
        if not batch_id:
            raise ValidationError("batch id is required")
        require_batch(self._uow, batch_id)

        parsed = parse_export(buffer)
        upload_id = uuid4().hex
        records = [
            RawShiftRecord(batch_id=batch_id, upload_id=upload_id, **asdict(shift))
            for shift in parsed.shifts
        ]
        with self._uow.atomic(f"store export for batch {batch_id}") as session:
            RawShiftRepository(session).replace_for_batch(batch_id, records)

        logger.info(
            "Ingested %d shifts from %s into batch %s (upload %s)",
            len(records), filename or "upload", batch_id, upload_id,
        )
        items = [RawShiftRead.model_validate(s) for s in parsed.shifts]
        return IngestResult(
            batch_id=batch_id,
            upload_id=upload_id,
            header_row=parsed.header_row,
            total_rows=parsed.total_rows,
            label_count=len({s.job_label for s in parsed.shifts}),
            items=items,
            total=len(items),
        )
