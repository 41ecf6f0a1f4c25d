"""Approval workflow DTOs."""
from __future__ import annotations
from datetime import date
from pydantic import BaseModel, field_validator, model_validator
from crewhours.api.schemas.aggregation import SpecialShiftTypeDTO


class ApproveRequest(BaseModel):
    job_ids: list[int]

    @field_validator("job_ids")
    @classmethod
    def job_ids_not_empty(cls, v: list[int]) -> list[int]:
        if not v:
            raise ValueError("job_ids must not be empty")
        return v


class ApproveResult(BaseModel):
    status: str = "ok"
    jobs_updated: int = 0
    shifts_approved: int = 0
    special_shifts_approved: int = 0
    jobs_closed: int = 0
    alerts_sent: int = 0
    alert_error: str | None = None


class RejectPair(BaseModel):
    """A crew shift (employee_id) or a special bucket (shift_type) on a job."""
    job_id: int
    employee_id: int | None = None
    shift_type: SpecialShiftTypeDTO | None = None

    @model_validator(mode="after")
    def exactly_one_target(self) -> "RejectPair":
        if (self.employee_id is None) == (self.shift_type is None):
            raise ValueError("give exactly one of employee_id or shift_type")
        return self


class RejectRequest(BaseModel):
    pairs: list[RejectPair]


class RejectResult(BaseModel):
    status: str = "ok"
    rejected_count: int


class PendingShiftRead(BaseModel):
    id: int
    employee_id: int
    employee_name: str
    hours: float


class PendingSpecialShiftRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    shift_type: SpecialShiftTypeDTO
    shift_count: int
    hours: float


class PendingJobRead(BaseModel):
    id: int
    name: str
    branch_id: int
    closing_date: date | None = None
    estimated_hours: float | None = None
    crew_count: int
    total_hours: float
    shifts: list[PendingShiftRead]
    special_shifts: list[PendingSpecialShiftRead]


class PendingJobList(BaseModel):
    items: list[PendingJobRead]
    total: int
