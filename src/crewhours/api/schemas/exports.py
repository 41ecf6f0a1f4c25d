"""Time-clock export DTOs."""
from __future__ import annotations
from datetime import date
from pydantic import BaseModel


class RawShiftRead(BaseModel):
    model_config = {"from_attributes": True}

    source_row: int
    shift_date: date | None = None
    job_label: str
    crew_member_name: str
    tags: str = ""
    notes: str = ""
    regular_hours: float
    ot_hours: float
    ot2_hours: float
    pto_hours: float
    total_hours: float
    is_qc: bool
    is_delivery_drop: bool


class IngestResult(BaseModel):
    status: str = "ok"
    batch_id: str
    upload_id: str
    header_row: int
    total_rows: int
    label_count: int
    items: list[RawShiftRead]
    total: int
