"""Approval state machine for persisted jobs, shifts and special shifts.

The functions below are the only code that writes ``performance_status``,
``approved_shift``, ``in_payload`` or the job vocabulary status.
"""
from __future__ import annotations
from datetime import date
from enum import Enum
from typing import Protocol
from crewhours.domain.exceptions import InvalidTransitionError


class ShiftStatus(str, Enum):
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class JobPerformanceStatus(str, Enum):
    SYNCED = "synced"
    PENDING_APPROVAL = "pending_approval"


class JobStatusName(str, Enum):
    """Job status vocabulary owned by the wider job-tracking system."""
    REQUIRES_CREW_LEAD = "Requires Crew Lead"
    IN_PROGRESS = "In Progress"
    CLOSED_JOB = "Closed Job"


class SpecialShiftType(str, Enum):
    QC = "QC"
    DELIVERY_DROP = "DELIVERY_DROP"

    @property
    def display_name(self) -> str:
        return _SPECIAL_DISPLAY[self]


_SPECIAL_DISPLAY = {
    SpecialShiftType.QC: "QC Special Shift",
    SpecialShiftType.DELIVERY_DROP: "Job Delivery Special Shift",
}


class _Approvable(Protocol):
    hours: float
    approved_shift: bool
    performance_status: ShiftStatus


class _StatefulJob(Protocol):
    performance_status: JobPerformanceStatus
    status: JobStatusName | None
    in_payload: bool
    closing_date: date | None


# --- shifts / special shifts ---

def new_shift_state(auto_approve: bool) -> tuple[bool, ShiftStatus]:
    """(approved_shift, performance_status) for a freshly created entry."""
    if auto_approve:
        return True, ShiftStatus.APPROVED
    return False, ShiftStatus.PENDING_APPROVAL


def rewrite_hours(entry: _Approvable, hours: float) -> None:
    if entry.approved_shift or entry.performance_status == ShiftStatus.APPROVED:
        raise InvalidTransitionError("approved hours are immutable")
    entry.hours = hours


def approve(entry: _Approvable) -> None:
    if entry.performance_status != ShiftStatus.PENDING_APPROVAL:
        raise InvalidTransitionError(
            f"cannot approve entry in status {entry.performance_status.value}"
        )
    entry.performance_status = ShiftStatus.APPROVED
    entry.approved_shift = True


def reject(entry: _Approvable) -> None:
    if entry.performance_status != ShiftStatus.PENDING_APPROVAL:
        raise InvalidTransitionError(
            f"cannot reject entry in status {entry.performance_status.value}"
        )
    entry.performance_status = ShiftStatus.REJECTED


def blocks_closing(entry: _Approvable) -> bool:
    return entry.performance_status == ShiftStatus.PENDING_APPROVAL


# --- jobs ---

def initial_job_state(auto_approve: bool, has_crew_lead: bool) -> tuple[JobPerformanceStatus, JobStatusName]:
    perf = JobPerformanceStatus.SYNCED if auto_approve else JobPerformanceStatus.PENDING_APPROVAL
    vocab = JobStatusName.IN_PROGRESS if has_crew_lead else JobStatusName.REQUIRES_CREW_LEAD
    return perf, vocab


def mark_job_pending(job: _StatefulJob) -> None:
    job.performance_status = JobPerformanceStatus.PENDING_APPROVAL


def mark_job_synced(job: _StatefulJob) -> None:
    job.performance_status = JobPerformanceStatus.SYNCED


def close_job(job: _StatefulJob, today: date | None = None) -> bool:
    """Move a fully approved job into the closed / in-payload state.

    Returns True when the job was not already in the payload.
    """
    newly_closed = not job.in_payload
    job.performance_status = JobPerformanceStatus.SYNCED
    job.status = JobStatusName.CLOSED_JOB
    job.in_payload = True
    if job.closing_date is None:
        job.closing_date = today or date.today()
    return newly_closed
