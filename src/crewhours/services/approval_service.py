"""Approval workflow: approve jobs, reject individual shifts, list pending work."""
from __future__ import annotations
import logging
from crewhours.api.schemas.approval import (
    ApproveRequest, ApproveResult, PendingJobList, PendingJobRead, PendingShiftRead,
    PendingSpecialShiftRead, RejectRequest, RejectResult,
)
from crewhours.domain.exceptions import NotFoundError
from crewhours.domain.status import (
    JobPerformanceStatus, ShiftStatus, SpecialShiftType, approve, blocks_closing, close_job,
    mark_job_synced, reject,
)
from crewhours.infra.alerts import AlertSink, default_sink
from crewhours.infra.db.repositories.employee_repository import EmployeeRepository
from crewhours.infra.db.repositories.job_repository import (
    JobRepository, ShiftRepository, SpecialShiftRepository,
)
from crewhours.infra.db.uow import UnitOfWork
from crewhours.services.overrun import dispatch_overruns

logger = logging.getLogger(__name__)


class ApprovalService:
    def __init__(self, uow: UnitOfWork, alert_sink: AlertSink | None = None) -> None:
        self._uow = uow
        self._sink = alert_sink or default_sink()

    def approve_jobs(self, payload: ApproveRequest) -> ApproveResult:
        """Approve every pending entry of the given jobs in one transaction.

        Jobs left with no pending entries are closed and put in the payload;
        the newly closed ones go to the alert sink in a single call after commit.
        """
        session = self._uow.session
        job_ids = list(dict.fromkeys(payload.job_ids))
        jobs = JobRepository(session).get_many(job_ids)
        missing = set(job_ids) - {j.id for j in jobs}
        if missing:
            raise NotFoundError(f"Job(s) not found: {sorted(missing)}")

        shifts = ShiftRepository(session)
        specials = SpecialShiftRepository(session)
        result = ApproveResult()
        closed_ids: list[int] = []
        with self._uow.atomic(f"approve jobs {job_ids}"):
            for shift in shifts.list_pending_by_jobs(job_ids):
                approve(shift)
                session.add(shift)
                result.shifts_approved += 1
            for special in specials.list_pending_by_jobs(job_ids):
                approve(special)
                session.add(special)
                result.special_shifts_approved += 1
            session.flush()

            for job in jobs:
                if job.performance_status == JobPerformanceStatus.PENDING_APPROVAL:
                    mark_job_synced(job)
                    result.jobs_updated += 1
                entries = shifts.list_by_job(job.id) + specials.list_by_job(job.id)
                if not any(blocks_closing(e) for e in entries) and close_job(job):
                    result.jobs_closed += 1
                    closed_ids.append(job.id)
                session.add(job)

        logger.info(
            "Approved %d shift(s) and %d special shift(s) across %d job(s); %d closed",
            result.shifts_approved, result.special_shifts_approved, len(jobs), result.jobs_closed,
        )
        result.alerts_sent, result.alert_error = dispatch_overruns(session, closed_ids, self._sink)
        if result.alert_error:
            result.status = "partial"
        return result

    def reject_shifts(self, payload: RejectRequest) -> RejectResult:
        """Reject pairs still pending approval; anything else is left alone."""
        session = self._uow.session
        shifts = ShiftRepository(session)
        specials = SpecialShiftRepository(session)
        rejected = 0
        with self._uow.atomic("reject shifts"):
            for pair in payload.pairs:
                if pair.employee_id is not None:
                    entry = shifts.get_pair(pair.employee_id, pair.job_id)
                else:
                    entry = specials.get_pair(pair.job_id, SpecialShiftType(pair.shift_type.value))
                if entry is None or entry.performance_status != ShiftStatus.PENDING_APPROVAL:
                    continue
                reject(entry)
                session.add(entry)
                rejected += 1

        logger.info("Rejected %d of %d requested pair(s)", rejected, len(payload.pairs))
        return RejectResult(rejected_count=rejected)

    def list_pending(self, branch_id: int | None = None) -> PendingJobList:
        session = self._uow.session
        employees = EmployeeRepository(session)
        items: list[PendingJobRead] = []
        for job in JobRepository(session).list_pending(branch_id):
            pending_shifts = ShiftRepository(session).list_pending_by_jobs([job.id])
            pending_specials = SpecialShiftRepository(session).list_pending_by_jobs([job.id])
            shift_reads = []
            for shift in pending_shifts:
                employee = employees.get_by_id(shift.employee_id)
                shift_reads.append(PendingShiftRead(
                    id=shift.id,
                    employee_id=shift.employee_id,
                    employee_name=employee.full_name if employee else f"#{shift.employee_id}",
                    hours=shift.hours,
                ))
            items.append(PendingJobRead(
                id=job.id,
                name=job.name,
                branch_id=job.branch_id,
                closing_date=job.closing_date,
                estimated_hours=job.estimated_hours,
                crew_count=len({s.employee_id for s in pending_shifts}),
                total_hours=round(
                    sum(s.hours for s in pending_shifts) + sum(s.hours for s in pending_specials), 2
                ),
                shifts=shift_reads,
                special_shifts=[
                    PendingSpecialShiftRead(
                        id=s.id, shift_type=s.shift_type.value, shift_count=s.shift_count, hours=s.hours,
                    )
                    for s in pending_specials
                ],
            ))
        return PendingJobList(items=items, total=len(items))
