"""Aggregated line DTOs."""
from __future__ import annotations
from enum import Enum
from pydantic import BaseModel
from crewhours.api.schemas.matches import UnmatchedLabelRead


class SpecialShiftTypeDTO(str, Enum):
    QC = "QC"
    DELIVERY_DROP = "DELIVERY_DROP"


class AggregatedLineRead(BaseModel):
    model_config = {"from_attributes": True}

    job_id: int
    job_name: str
    display_name: str
    special_type: SpecialShiftTypeDTO | None = None
    has_special: bool
    shift_count: int
    regular_hours: float
    ot_hours: float
    ot2_hours: float
    total_hours: float
    tags: str = ""


class AggregationRead(BaseModel):
    batch_id: str
    lines: list[AggregatedLineRead]
    unmatched: list[UnmatchedLabelRead]
    total: int
