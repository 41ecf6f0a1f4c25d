"""Save-performance DTOs."""
from __future__ import annotations
from pydantic import BaseModel, field_validator
from crewhours.api.schemas.aggregation import SpecialShiftTypeDTO


class EditedLine(BaseModel):
    """Operator-corrected aggregated line; ``job_id`` is the ledger row id."""
    job_id: int
    display_name: str
    special_type: SpecialShiftTypeDTO | None = None
    shift_count: int = 0
    regular_hours: float = 0.0
    ot_hours: float = 0.0
    ot2_hours: float = 0.0
    total_hours: float = 0.0
    tags: str = ""

    @field_validator("shift_count")
    @classmethod
    def count_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("shift_count must not be negative")
        return v

    @field_validator("regular_hours", "ot_hours", "ot2_hours", "total_hours")
    @classmethod
    def hours_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("hours must not be negative")
        return v


class SaveRequest(BaseModel):
    auto_approve: bool = False
    job_ids: list[int] | None = None
    edited_lines: list[EditedLine] | None = None


class SaveError(BaseModel):
    job_name: str
    display_name: str | None = None
    detail: str


class SaveResult(BaseModel):
    status: str = "ok"
    jobs_created: int = 0
    jobs_updated: int = 0
    shifts_created: int = 0
    shifts_skipped: int = 0
    duplicates_approved: int = 0
    jobs_closed: int = 0
    job_ids: list[int] = []
    errors: list[SaveError] = []
    alerts_sent: int = 0
    alert_error: str | None = None
