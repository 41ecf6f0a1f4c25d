"""Overrun evaluation and post-commit alert dispatch."""
from __future__ import annotations
import logging
from sqlmodel import Session
from crewhours.domain.exceptions import AlertDispatchError
from crewhours.domain.status import ShiftStatus
from crewhours.infra.alerts import AlertSink, OverrunAlert
from crewhours.infra.db.repositories.employee_repository import EmployeeRepository
from crewhours.infra.db.repositories.job_repository import (
    JobRepository, ShiftRepository, SpecialShiftRepository,
)

logger = logging.getLogger(__name__)


def approved_hours(session: Session, job_id: int) -> float:
    entries = ShiftRepository(session).list_by_job(job_id) + SpecialShiftRepository(session).list_by_job(job_id)
    return round(sum(e.hours for e in entries if e.performance_status == ShiftStatus.APPROVED), 2)


def evaluate_overruns(session: Session, job_ids: list[int]) -> list[OverrunAlert]:
    """Alerts for jobs whose approved hours exceed their estimate."""
    employees = EmployeeRepository(session)
    alerts: list[OverrunAlert] = []
    for job in JobRepository(session).get_many(job_ids):
        if not job.estimated_hours:
            continue
        worked = approved_hours(session, job.id)
        if worked <= job.estimated_hours:
            continue
        lead = employees.get_by_id(job.crew_leader_id) if job.crew_leader_id else None
        alerts.append(OverrunAlert(
            job_id=job.id,
            job_name=job.name,
            branch=job.branch_id,
            crew_leader=lead.full_name if lead else None,
            closing_date=job.closing_date,
            at_estimated_hours=round(job.estimated_hours, 2),
            total_hours_worked=worked,
            hours_saved=round(job.estimated_hours - worked, 2),
        ))
    return alerts


def dispatch_overruns(session: Session, job_ids: list[int], sink: AlertSink) -> tuple[int, str | None]:
    """Send one batch for the given closed jobs. Returns (alerts sent, error)."""
    if not job_ids:
        return 0, None
    alerts = evaluate_overruns(session, job_ids)
    if not alerts:
        logger.info("No overruns among %d closed job(s)", len(job_ids))
        return 0, None
    try:
        sink.send(alerts)
    except AlertDispatchError as exc:
        logger.error("Overrun alert dispatch failed for %d job(s): %s", len(alerts), exc.message)
        return 0, exc.message
    return len(alerts), None
