"""Durable job / shift records guarded by the approval state machine."""
from datetime import date, datetime, timezone
from enum import Enum
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel
from crewhours.domain.status import (
    JobPerformanceStatus, JobStatusName, ShiftStatus, SpecialShiftType,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"


class Employee(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    first_name: str = Field(index=True)
    last_name: str = ""
    email: str
    role: str = "crew_member"
    status: EmployeeStatus = EmployeeStatus.PENDING
    branch_id: int | None = Field(default=None, index=True)
    is_deleted: bool = False
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Job(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    branch_id: int = Field(index=True)
    crew_leader_id: int | None = Field(default=None, foreign_key="employee.id")
    closing_date: date | None = None
    sold_price: float | None = None
    estimated_hours: float | None = None
    performance_status: JobPerformanceStatus = JobPerformanceStatus.PENDING_APPROVAL
    status: JobStatusName | None = None
    in_payload: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Shift(SQLModel, table=True):
    """Hours for one crew member on one job."""
    __table_args__ = (UniqueConstraint("employee_id", "job_id"),)

    id: int | None = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="employee.id", index=True)
    job_id: int = Field(foreign_key="job.id", index=True)
    hours: float
    approved_shift: bool = False
    performance_status: ShiftStatus = ShiftStatus.PENDING_APPROVAL
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class JobSpecialShift(SQLModel, table=True):
    """Fixed-duration QC / delivery-drop hours pooled per job."""
    __table_args__ = (UniqueConstraint("job_id", "shift_type"),)

    id: int | None = Field(default=None, primary_key=True)
    job_id: int = Field(foreign_key="job.id", index=True)
    shift_type: SpecialShiftType
    shift_count: int = 0
    hours: float
    approved_shift: bool = False
    performance_status: ShiftStatus = ShiftStatus.PENDING_APPROVAL
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
