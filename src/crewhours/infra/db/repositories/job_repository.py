"""Repositories for persisted jobs, crew shifts and special shifts."""
from __future__ import annotations
from sqlmodel import Session, select
from crewhours.domain.status import JobPerformanceStatus, ShiftStatus, SpecialShiftType
from crewhours.models.performance import Job, JobSpecialShift, Shift


class JobRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def get_by_id(self, job_id: int) -> Job | None:
        return self._s.get(Job, job_id)

    def get_many(self, job_ids: list[int]) -> list[Job]:
        if not job_ids:
            return []
        return list(self._s.exec(select(Job).where(Job.id.in_(job_ids)).order_by(Job.id)).all())

    def list_by_branch(self, branch_id: int) -> list[Job]:
        return list(self._s.exec(select(Job).where(Job.branch_id == branch_id).order_by(Job.id)).all())

    def list_pending(self, branch_id: int | None = None) -> list[Job]:
        stmt = select(Job).where(Job.performance_status == JobPerformanceStatus.PENDING_APPROVAL)
        if branch_id is not None:
            stmt = stmt.where(Job.branch_id == branch_id)
        return list(self._s.exec(stmt.order_by(Job.id)).all())

    def create(self, **fields) -> Job:
        job = Job(**fields)
        self._s.add(job)
        self._s.flush()
        return job


class ShiftRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def get_pair(self, employee_id: int, job_id: int) -> Shift | None:
        stmt = select(Shift).where(Shift.employee_id == employee_id, Shift.job_id == job_id)
        return self._s.exec(stmt).first()

    def list_by_job(self, job_id: int) -> list[Shift]:
        return list(self._s.exec(select(Shift).where(Shift.job_id == job_id).order_by(Shift.id)).all())

    def list_pending_by_jobs(self, job_ids: list[int]) -> list[Shift]:
        stmt = select(Shift).where(
            Shift.job_id.in_(job_ids), Shift.performance_status == ShiftStatus.PENDING_APPROVAL
        )
        return list(self._s.exec(stmt.order_by(Shift.id)).all())

    def create(self, **fields) -> Shift:
        shift = Shift(**fields)
        self._s.add(shift)
        self._s.flush()
        return shift


class SpecialShiftRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def get_pair(self, job_id: int, shift_type: SpecialShiftType) -> JobSpecialShift | None:
        stmt = select(JobSpecialShift).where(
            JobSpecialShift.job_id == job_id, JobSpecialShift.shift_type == shift_type
        )
        return self._s.exec(stmt).first()

    def list_by_job(self, job_id: int) -> list[JobSpecialShift]:
        stmt = select(JobSpecialShift).where(JobSpecialShift.job_id == job_id).order_by(JobSpecialShift.id)
        return list(self._s.exec(stmt).all())

    def list_pending_by_jobs(self, job_ids: list[int]) -> list[JobSpecialShift]:
        stmt = select(JobSpecialShift).where(
            JobSpecialShift.job_id.in_(job_ids),
            JobSpecialShift.performance_status == ShiftStatus.PENDING_APPROVAL,
        )
        return list(self._s.exec(stmt.order_by(JobSpecialShift.id)).all())

    def create(self, **fields) -> JobSpecialShift:
        special = JobSpecialShift(**fields)
        self._s.add(special)
        self._s.flush()
        return special
