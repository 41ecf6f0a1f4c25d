"""Service tests for the approval workflow and overrun alerts."""
import pytest
from sqlmodel import Session, select
from crewhours.api.schemas.approval import ApproveRequest, RejectPair, RejectRequest
from crewhours.api.schemas.performance import SaveRequest
from crewhours.domain.exceptions import NotFoundError
from crewhours.domain.status import JobPerformanceStatus, JobStatusName, ShiftStatus
from crewhours.infra.db.uow import UnitOfWork
from crewhours.models.performance import Job, JobSpecialShift, Shift
from crewhours.services.approval_service import ApprovalService
from crewhours.services.performance_service import PerformanceService


def _approve(job_ids, sink):
    with UnitOfWork() as uow:
        return ApprovalService(uow, alert_sink=sink).approve_jobs(ApproveRequest(job_ids=job_ids))


def _reject(pairs, sink):
    with UnitOfWork() as uow:
        return ApprovalService(uow, alert_sink=sink).reject_shifts(RejectRequest(pairs=pairs))


@pytest.fixture
def saved(make_batch, confirm, export_csv, recording_sink):
    """Save pending hours for ledger rows ``{job_name: (estimate, [(crew, regular, tags), ...])}``."""
    def _make(jobs):
        rows = [
            ("01/06/2025", name, crew, tags, regular)
            for name, (_, shifts) in jobs.items()
            for crew, regular, tags in shifts
        ]
        batch_id, row_ids = make_batch(
            [dict(job_name=name, estimated_hours=est) for name, (est, _) in jobs.items()], export_csv(*rows),
        )
        confirm(batch_id, dict(zip(jobs, row_ids)))
        with UnitOfWork() as uow:
            result = PerformanceService(uow, alert_sink=recording_sink).save(batch_id, SaveRequest())
        return result.job_ids
    return _make


def test_end_to_end_scenario_without_overrun(make_batch, confirm, export_csv, recording_sink, use_test_engine):
    export = export_csv(
        ("01/06/2025", "Lorie Scholten", "Drew Gipson (D)", "", "4:30"),
        ("01/07/2025", "Lorie Scholten", "Drew Gipson (D)", "", "5:00", "1:00"),
    )
    batch_id, (row_id,) = make_batch([dict(job_name="Lorie Scholten", branch_id=1, estimated_hours=20)], export)
    confirm(batch_id, {"Lorie Scholten": row_id})

    with UnitOfWork() as uow:
        saved = PerformanceService(uow, alert_sink=recording_sink).save(batch_id, SaveRequest(auto_approve=False))
    [job_id] = saved.job_ids
    with Session(use_test_engine) as s:
        assert s.get(Job, job_id).performance_status == JobPerformanceStatus.PENDING_APPROVAL
        shift = s.exec(select(Shift)).one()
        assert shift.approved_shift is False
        assert shift.hours == 11.0

    result = _approve([job_id], recording_sink)

    assert result.status == "ok"
    assert result.shifts_approved == 1
    assert result.jobs_updated == 1
    assert result.jobs_closed == 1
    assert result.alerts_sent == 0
    assert recording_sink.calls == []
    with Session(use_test_engine) as s:
        job = s.get(Job, job_id)
        shift = s.exec(select(Shift)).one()
        assert shift.approved_shift is True
        assert shift.performance_status == ShiftStatus.APPROVED
        assert job.performance_status == JobPerformanceStatus.SYNCED
        assert job.status == JobStatusName.CLOSED_JOB
        assert job.in_payload is True


def test_overruns_are_sent_in_one_call(saved, recording_sink):
    job_ids = saved({
        "Lorie Scholten": (5, [("Drew Gipson", "8:00", "")]),
        "Hart Attic": (2, [("Sam Lee", "1:00", "QC")]),
        "Miller Garage": (40, [("Ana Ruiz", "3:00", "")]),
    })
    result = _approve(job_ids, recording_sink)

    assert result.jobs_closed == 3
    assert result.special_shifts_approved == 1
    assert result.alerts_sent == 2
    [alerts] = recording_sink.calls
    by_name = {a.job_name: a for a in alerts}
    assert set(by_name) == {"Lorie Scholten", "Hart Attic"}
    assert by_name["Hart Attic"].total_hours_worked == 3.0
    assert by_name["Hart Attic"].hours_saved == -1.0
    assert by_name["Lorie Scholten"].to_payload()["at_estimated_hours"] == 5.0


def test_alert_failure_keeps_approval(saved, failing_sink, use_test_engine):
    job_ids = saved({"Lorie Scholten": (5, [("Drew Gipson", "8:00", "")])})
    result = _approve(job_ids, failing_sink)

    assert result.status == "partial"
    assert result.alert_error == "webhook unreachable"
    with Session(use_test_engine) as s:
        assert s.exec(select(Shift)).one().approved_shift is True
        assert s.get(Job, job_ids[0]).in_payload is True


def test_second_approval_does_not_realert(saved, recording_sink):
    job_ids = saved({"Lorie Scholten": (5, [("Drew Gipson", "8:00", "")])})
    _approve(job_ids, recording_sink)
    again = _approve(job_ids, recording_sink)

    assert again.shifts_approved == 0
    assert again.jobs_closed == 0
    assert len(recording_sink.calls) == 1


def test_reject_only_pending_pairs(saved, recording_sink, use_test_engine):
    job_ids = saved({"Lorie Scholten": (20, [("Drew Gipson", "8:00", ""), ("Sam Lee", "2:00", "QC")])})
    job_id = job_ids[0]
    with Session(use_test_engine) as s:
        employee_id = s.exec(select(Shift)).one().employee_id

    result = _reject(
        [RejectPair(job_id=job_id, employee_id=employee_id), RejectPair(job_id=job_id, shift_type="QC")],
        recording_sink,
    )
    assert result.rejected_count == 2
    assert _reject([RejectPair(job_id=job_id, employee_id=employee_id)], recording_sink).rejected_count == 0

    approved = _approve([job_id], recording_sink)
    assert approved.shifts_approved == 0
    assert approved.special_shifts_approved == 0
    with Session(use_test_engine) as s:
        assert s.exec(select(Shift)).one().performance_status == ShiftStatus.REJECTED
        assert s.exec(select(JobSpecialShift)).one().performance_status == ShiftStatus.REJECTED


def test_reject_pair_needs_one_target():
    with pytest.raises(ValueError):
        RejectPair(job_id=1)
    with pytest.raises(ValueError):
        RejectPair(job_id=1, employee_id=2, shift_type="QC")


def test_approve_unknown_job_raises(use_test_engine, recording_sink):
    with pytest.raises(NotFoundError):
        _approve([12345], recording_sink)


def test_list_pending(saved, recording_sink):
    job_ids = saved({"Lorie Scholten": (20, [("Drew Gipson", "8:00", ""), ("Sam Lee", "2:00", "QC")])})
    with UnitOfWork() as uow:
        pending = ApprovalService(uow, alert_sink=recording_sink).list_pending(branch_id=1)

    assert pending.total == 1
    job = pending.items[0]
    assert job.id == job_ids[0]
    assert job.crew_count == 1
    assert job.total_hours == 11.0
    assert job.shifts[0].employee_name == "Drew Gipson"
    assert job.special_shifts[0].shift_type.value == "QC"

    _approve(job_ids, recording_sink)
    with UnitOfWork() as uow:
        assert ApprovalService(uow, alert_sink=recording_sink).list_pending().total == 0
