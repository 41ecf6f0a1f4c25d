"""Unit tests for the approval state machine."""
from dataclasses import dataclass
from datetime import date
import pytest
from crewhours.domain.exceptions import InvalidTransitionError
from crewhours.domain.status import (
    JobPerformanceStatus, JobStatusName, ShiftStatus, approve, blocks_closing, close_job,
    initial_job_state, mark_job_pending, new_shift_state, reject, rewrite_hours,
)


@dataclass
class Entry:
    hours: float = 5.0
    approved_shift: bool = False
    performance_status: ShiftStatus = ShiftStatus.PENDING_APPROVAL


@dataclass
class FakeJob:
    performance_status: JobPerformanceStatus = JobPerformanceStatus.PENDING_APPROVAL
    status: JobStatusName | None = JobStatusName.IN_PROGRESS
    in_payload: bool = False
    closing_date: date | None = None


def test_new_shift_state():
    assert new_shift_state(True) == (True, ShiftStatus.APPROVED)
    assert new_shift_state(False) == (False, ShiftStatus.PENDING_APPROVAL)


def test_approve_is_one_way():
    entry = Entry()
    approve(entry)
    assert entry.approved_shift is True
    assert entry.performance_status == ShiftStatus.APPROVED
    with pytest.raises(InvalidTransitionError):
        approve(entry)
    with pytest.raises(InvalidTransitionError):
        reject(entry)


def test_approved_hours_are_immutable():
    entry = Entry(hours=10.0, approved_shift=True, performance_status=ShiftStatus.APPROVED)
    with pytest.raises(InvalidTransitionError):
        rewrite_hours(entry, 5.0)
    assert entry.hours == 10.0


def test_rejected_entry_keeps_status_on_rewrite():
    entry = Entry()
    reject(entry)
    rewrite_hours(entry, 7.0)
    assert entry.hours == 7.0
    assert entry.performance_status == ShiftStatus.REJECTED
    assert blocks_closing(entry) is False
    with pytest.raises(InvalidTransitionError):
        approve(entry)


def test_only_pending_entries_block_closing():
    assert blocks_closing(Entry()) is True
    assert blocks_closing(Entry(performance_status=ShiftStatus.APPROVED)) is False


def test_initial_job_state():
    assert initial_job_state(True, True) == (JobPerformanceStatus.SYNCED, JobStatusName.IN_PROGRESS)
    assert initial_job_state(False, False) == (
        JobPerformanceStatus.PENDING_APPROVAL, JobStatusName.REQUIRES_CREW_LEAD,
    )


def test_close_job_keeps_recorded_date_and_reports_first_close():
    job = FakeJob(closing_date=date(2025, 1, 3))
    assert close_job(job, today=date(2025, 2, 1)) is True
    assert job.status == JobStatusName.CLOSED_JOB
    assert job.performance_status == JobPerformanceStatus.SYNCED
    assert job.in_payload is True
    assert job.closing_date == date(2025, 1, 3)
    assert close_job(job) is False


def test_close_job_fills_missing_date():
    job = FakeJob()
    close_job(job, today=date(2025, 2, 1))
    assert job.closing_date == date(2025, 2, 1)
    mark_job_pending(job)
    assert job.performance_status == JobPerformanceStatus.PENDING_APPROVAL
