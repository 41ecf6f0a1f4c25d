"""Persist aggregated lines as jobs, crew shifts and special shifts.

Approved entries are immutable: a second save for an approved
(crew member, job) or (special type, job) pair is counted as
``duplicates_approved`` and leaves the stored hours untouched.
"""
from __future__ import annotations
import logging
from collections import OrderedDict
from datetime import date, datetime, timezone
from typing import Callable
from sqlmodel import Session
from crewhours.api.schemas.performance import EditedLine, SaveError, SaveRequest, SaveResult
from crewhours.config import settings
from crewhours.domain.exceptions import DirectoryResolutionError, NotFoundError
from crewhours.domain.status import (
    ShiftStatus, SpecialShiftType, blocks_closing, close_job, initial_job_state,
    mark_job_pending, new_shift_state, rewrite_hours,
)
from crewhours.infra.alerts import AlertSink, default_sink
from crewhours.infra.db.repositories.job_repository import (
    JobRepository, ShiftRepository, SpecialShiftRepository,
)
from crewhours.infra.db.uow import UnitOfWork
from crewhours.infra.directory import Directory, EmployeeDirectory
from crewhours.models.core import LedgerJobRow, SyncBatch
from crewhours.models.performance import Job
from crewhours.reconcile.aggregator import AggregatedLine, apply_special_policy
from crewhours.reconcile.matcher import DISAMBIGUATION_MIN_CONFIDENCE, best_scoring, normalize_job_name
from crewhours.services.aggregation_service import AggregationService
from crewhours.services.batch_service import require_batch
from crewhours.services.overrun import dispatch_overruns

logger = logging.getLogger(__name__)

CREATED, REWRITTEN, DUPLICATE_APPROVED = "created", "rewritten", "duplicate_approved"


def _default_directory(session: Session) -> Directory:
    return EmployeeDirectory(session, min_confidence=settings.EMPLOYEE_MATCH_MIN_CONFIDENCE)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def edited_to_line(edit: EditedLine, job_name: str) -> AggregatedLine:
    special = SpecialShiftType(edit.special_type.value) if edit.special_type else None
    line = AggregatedLine(
        job_id=edit.job_id,
        job_name=job_name,
        display_name=special.display_name if special else edit.display_name.strip(),
        special_type=special,
        shift_count=edit.shift_count,
        regular_hours=round(edit.regular_hours, 2),
        ot_hours=round(edit.ot_hours, 2),
        ot2_hours=round(edit.ot2_hours, 2),
        total_hours=round(edit.total_hours, 2),
        tags=edit.tags,
    )
    if special is not None:
        apply_special_policy(line, settings.SPECIAL_SHIFT_HOURS)
    return line


class PerformanceService:
    def __init__(
        self,
        uow: UnitOfWork,
        alert_sink: AlertSink | None = None,
        directory_factory: Callable[[Session], Directory] | None = None,
    ) -> None:
        self._uow = uow
        self._sink = alert_sink or default_sink()
        self._directory_factory = directory_factory or _default_directory

    def save(self, batch_id: str, payload: SaveRequest) -> SaveResult:
        """Persist the batch's aggregated lines in one unit of work.

        Directory failures for a single crew member are collected in
        ``errors`` and the rest of the batch is still saved. Any database
        error rolls the whole call back.
        """
        batch = require_batch(self._uow, batch_id)
        result_agg, rows, _ = AggregationService(self._uow).compute(batch_id)
        lines = self._apply_edits(result_agg.lines, payload.edited_lines, rows)
        if payload.job_ids is not None:
            wanted = set(payload.job_ids)
            lines = [line for line in lines if line.job_id in wanted]

        by_row: OrderedDict[int, list[AggregatedLine]] = OrderedDict()
        for line in lines:
            by_row.setdefault(line.job_id, []).append(line)

        result = SaveResult()
        closed_ids: list[int] = []
        session = self._uow.session
        directory = self._directory_factory(session)
        with self._uow.atomic(f"save batch {batch_id}"):
            for row_id, job_lines in by_row.items():
                row = rows[row_id]
                job, created = self._save_or_update_job(row, batch, directory, payload.auto_approve)
                if created:
                    result.jobs_created += 1
                else:
                    result.jobs_updated += 1
                result.job_ids.append(job.id)

                wrote_pending = False
                for line in job_lines:
                    if line.has_special:
                        if line.shift_count == 0:
                            continue
                        outcome, pending = self._upsert_special(job, line, payload.auto_approve)
                    else:
                        try:
                            employee_id = directory.resolve(line.display_name, row.branch_id)
                        except DirectoryResolutionError as exc:
                            logger.warning("Skipping %r on job %r: %s", line.display_name, job.name, exc.message)
                            result.errors.append(SaveError(
                                job_name=job.name, display_name=line.display_name, detail=exc.message,
                            ))
                            continue
                        outcome, pending = self._upsert_shift(job, employee_id, line, payload.auto_approve)

                    if outcome == CREATED:
                        result.shifts_created += 1
                    elif outcome == REWRITTEN:
                        result.shifts_skipped += 1
                    else:
                        result.duplicates_approved += 1
                    wrote_pending = wrote_pending or pending

                if wrote_pending:
                    mark_job_pending(job)
                elif self._ready_to_close(job) and close_job(job):
                    result.jobs_closed += 1
                    closed_ids.append(job.id)
                job.updated_at = _now()
                session.add(job)

            session.flush()

        result.alerts_sent, result.alert_error = dispatch_overruns(session, closed_ids, self._sink)
        if result.errors or result.alert_error:
            result.status = "partial"
        logger.info(
            "Batch %s saved: %d job(s) created, %d updated, %d shift(s) created, "
            "%d rewritten, %d duplicate-approved, %d error(s)",
            batch_id, result.jobs_created, result.jobs_updated, result.shifts_created,
            result.shifts_skipped, result.duplicates_approved, len(result.errors),
        )
        return result

    # --- jobs ---

    def _apply_edits(
        self,
        lines: list[AggregatedLine],
        edits: list[EditedLine] | None,
        rows: dict[int, LedgerJobRow],
    ) -> list[AggregatedLine]:
        """Operator-edited lines replace the computed lines of the jobs they cover."""
        if not edits:
            return lines
        for edit in edits:
            if edit.job_id not in rows:
                raise NotFoundError(f"Ledger row {edit.job_id} not found in batch")
        edited_jobs = {e.job_id for e in edits}
        kept = [line for line in lines if line.job_id not in edited_jobs]
        return kept + [edited_to_line(e, rows[e.job_id].job_name) for e in edits]

    def _find_existing_job(self, name: str, branch_id: int) -> Job | None:
        """Exact match on the normalized name first, then fuzzy within the branch."""
        normalized = normalize_job_name(name)
        candidates = JobRepository(self._uow.session).list_by_branch(branch_id)
        for job in candidates:
            if normalize_job_name(job.name).lower() == normalized.lower():
                return job

        best = best_scoring(normalized, candidates, key=lambda j: normalize_job_name(j.name))
        if best is None:
            return None
        if best.score >= settings.DUPLICATE_JOB_MIN_CONFIDENCE:
            logger.info("Job %r matched existing %r (%d%%)", name, best.candidate.name, best.score)
            return best.candidate
        if best.score >= DISAMBIGUATION_MIN_CONFIDENCE:
            logger.warning("Possible duplicate job: %r resembles %r (%d%%)", name, best.candidate.name, best.score)
        return None

    def _resolve_crew_lead(self, row: LedgerJobRow, directory: Directory) -> int | None:
        if not row.crew_leader or not row.crew_leader.strip():
            return None
        try:
            return directory.resolve(row.crew_leader, row.branch_id, role="crew_leader")
        except DirectoryResolutionError as exc:
            logger.warning("Crew lead for %r not resolved: %s", row.job_name, exc.message)
            return None

    def _save_or_update_job(
        self, row: LedgerJobRow, batch: SyncBatch, directory: Directory, auto_approve: bool,
    ) -> tuple[Job, bool]:
        branch_id = row.branch_id if row.branch_id is not None else batch.branch_id
        job = self._find_existing_job(row.job_name, branch_id)
        crew_lead_id = self._resolve_crew_lead(row, directory)

        if job is None:
            perf, vocab = initial_job_state(auto_approve, crew_lead_id is not None)
            job = JobRepository(self._uow.session).create(
                name=row.job_name.strip(),
                branch_id=branch_id,
                crew_leader_id=crew_lead_id,
                closing_date=row.closing_date or date.today(),
                sold_price=row.sold_price,
                estimated_hours=row.estimated_hours,
                performance_status=perf,
                status=vocab,
            )
            logger.info("Created job %r (id=%s, branch=%s)", job.name, job.id, branch_id)
            return job, True

        # a placeholder date never replaces a recorded one
        if row.closing_date is not None:
            job.closing_date = row.closing_date
        elif job.closing_date is None:
            job.closing_date = date.today()
        if row.sold_price is not None:
            job.sold_price = row.sold_price
        if row.estimated_hours is not None:
            job.estimated_hours = row.estimated_hours
        if crew_lead_id is not None:
            job.crew_leader_id = crew_lead_id
        return job, False

    def _ready_to_close(self, job: Job) -> bool:
        session = self._uow.session
        entries = ShiftRepository(session).list_by_job(job.id) + SpecialShiftRepository(session).list_by_job(job.id)
        return (
            not any(blocks_closing(e) for e in entries)
            and any(e.performance_status == ShiftStatus.APPROVED for e in entries)
        )

    # --- shifts ---

    def _upsert_shift(self, job: Job, employee_id: int, line: AggregatedLine, auto_approve: bool) -> tuple[str, bool]:
        """Returns (outcome, entry is pending approval afterwards)."""
        repo = ShiftRepository(self._uow.session)
        existing = repo.get_pair(employee_id, job.id)
        if existing is None:
            approved, status = new_shift_state(auto_approve)
            repo.create(
                employee_id=employee_id, job_id=job.id, hours=line.total_hours,
                approved_shift=approved, performance_status=status,
            )
            return CREATED, status == ShiftStatus.PENDING_APPROVAL

        if existing.approved_shift or existing.performance_status == ShiftStatus.APPROVED:
            logger.warning(
                "Duplicate approved shift: %r on job %r keeps %.2fh (offered %.2fh)",
                line.display_name, job.name, existing.hours, line.total_hours,
            )
            return DUPLICATE_APPROVED, False

        rewrite_hours(existing, line.total_hours)
        existing.updated_at = _now()
        self._uow.session.add(existing)
        return REWRITTEN, existing.performance_status == ShiftStatus.PENDING_APPROVAL

    def _upsert_special(self, job: Job, line: AggregatedLine, auto_approve: bool) -> tuple[str, bool]:
        repo = SpecialShiftRepository(self._uow.session)
        existing = repo.get_pair(job.id, line.special_type)
        if existing is None:
            approved, status = new_shift_state(auto_approve)
            repo.create(
                job_id=job.id, shift_type=line.special_type, shift_count=line.shift_count,
                hours=line.total_hours, approved_shift=approved, performance_status=status,
            )
            return CREATED, status == ShiftStatus.PENDING_APPROVAL

        if existing.approved_shift or existing.performance_status == ShiftStatus.APPROVED:
            logger.warning(
                "Duplicate approved %s on job %r keeps %.2fh", line.display_name, job.name, existing.hours,
            )
            return DUPLICATE_APPROVED, False

        rewrite_hours(existing, line.total_hours)
        existing.shift_count = line.shift_count
        existing.updated_at = _now()
        self._uow.session.add(existing)
        return REWRITTEN, existing.performance_status == ShiftStatus.PENDING_APPROVAL
