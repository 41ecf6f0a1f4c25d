"""Propose and confirm job-label matches between the ledger and an export."""
from __future__ import annotations
import logging
from crewhours.api.schemas.matches import (
    ConfirmRequest, ConfirmResult, MatchProposalRead, MatchStatusDTO, ProposalList, UnmatchedLabelRead,
)
from crewhours.config import settings
from crewhours.domain.exceptions import ConflictError, NotFoundError
from crewhours.infra.db.repositories.batch_repository import BatchRepository
from crewhours.infra.db.repositories.raw_shift_repository import MatchRepository, RawShiftRepository
from crewhours.infra.db.uow import UnitOfWork
from crewhours.reconcile.matcher import find_best_match, match_status
from crewhours.services.aggregation_service import crew_counts
from crewhours.services.batch_service import require_batch

logger = logging.getLogger(__name__)


class MatchingService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def propose_matches(self, batch_id: str, min_confidence: int | None = None) -> ProposalList:
        """One proposal per ledger row; raw labels nobody claimed are listed separately."""
        require_batch(self._uow, batch_id)
        session = self._uow.session
        threshold = settings.MATCH_MIN_CONFIDENCE if min_confidence is None else min_confidence
        rows = BatchRepository(session).list_ledger_rows(batch_id)
        records = RawShiftRepository(session).list_by_batch(batch_id)
        confirmed_by_row = {
            m.ledger_row_id: m.job_label
            for m in MatchRepository(session).list_by_batch(batch_id)
            if m.ledger_row_id is not None
        }

        # distinct labels in export order
        counts: dict[str, int] = {}
        hours: dict[str, float] = {}
        for r in records:
            counts[r.job_label] = counts.get(r.job_label, 0) + 1
            hours[r.job_label] = hours.get(r.job_label, 0.0) + (r.total_hours or 0.0)
        labels = list(counts)

        proposals: list[MatchProposalRead] = []
        claimed: set[str] = set(confirmed_by_row.values())
        for row in rows:
            best = find_best_match(row.job_name, labels, threshold, key=lambda label: label)
            score = best.score if best else 0
            status = match_status(score, threshold, settings.MATCH_REVIEW_THRESHOLD)
            matched = best.candidate if best else None
            if matched is not None:
                claimed.add(matched)
            proposals.append(MatchProposalRead(
                ledger_row_id=row.id,
                row_number=row.row_number,
                job_name=row.job_name,
                matched_label=matched,
                score=score,
                status=MatchStatusDTO(status),
                needs_review=status != "matched",
                shift_count=counts.get(matched, 0) if matched else 0,
                confirmed_label=confirmed_by_row.get(row.id),
            ))

        crews = crew_counts(records)
        unmatched = [
            UnmatchedLabelRead(
                job_label=label,
                shift_count=counts[label],
                total_hours=round(hours[label], 2),
                crew_count=crews.get(label, 0),
            )
            for label in labels
            if label not in claimed
        ]
        matched_count = sum(1 for p in proposals if p.matched_label)
        logger.info(
            "Batch %s: %d/%d ledger rows matched at >= %d, %d raw labels unmatched",
            batch_id, matched_count, len(proposals), threshold, len(unmatched),
        )
        return ProposalList(
            batch_id=batch_id,
            min_confidence=threshold,
            items=proposals,
            unmatched=unmatched,
            total=len(proposals),
        )

    def confirm_matches(self, batch_id: str, payload: ConfirmRequest) -> ConfirmResult:
        """Record operator decisions in request order.

        Returns the number of raw shift records covered by the confirmed labels.
        A ledger row may be claimed by one raw label only.
        """
        require_batch(self._uow, batch_id)
        session = self._uow.session
        batches = BatchRepository(session)
        raw = RawShiftRepository(session)
        matches = MatchRepository(session)

        update_count = 0
        claimed_in_request: dict[int, str] = {}
        with self._uow.atomic(f"store matches for batch {batch_id}"):
            for item in payload.matches:
                for claimed_row, label in list(claimed_in_request.items()):
                    if label == item.raw_label:
                        del claimed_in_request[claimed_row]
                covered = raw.count_by_label(batch_id, item.raw_label)
                if covered == 0:
                    raise NotFoundError(f"Raw label {item.raw_label!r} not found in batch {batch_id}")

                if item.ledger_row_id is not None:
                    row = batches.get_ledger_row(item.ledger_row_id)
                    if row is None or row.batch_id != batch_id:
                        raise NotFoundError(f"Ledger row {item.ledger_row_id} not found in batch {batch_id}")
                    previous = claimed_in_request.get(row.id)
                    if previous is not None and previous != item.raw_label:
                        raise ConflictError(
                            f"Ledger row {row.id} confirmed to both {previous!r} and {item.raw_label!r}"
                        )
                    holder = matches.get_by_ledger_row(batch_id, row.id)
                    if holder is not None and holder.job_label != item.raw_label:
                        raise ConflictError(
                            f"Ledger row {row.id} is already matched to {holder.job_label!r}"
                        )
                    claimed_in_request[row.id] = item.raw_label

                matches.upsert(batch_id, item.raw_label, item.ledger_row_id)
                update_count += covered

        logger.info("Batch %s: confirmed %d label(s) covering %d shift(s)",
                    batch_id, len(payload.matches), update_count)
        return ConfirmResult(update_count=update_count)
