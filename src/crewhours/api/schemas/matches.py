"""Match proposal / confirmation DTOs."""
from __future__ import annotations
from enum import Enum
from pydantic import BaseModel, field_validator


class MatchStatusDTO(str, Enum):
    MATCHED = "matched"
    NEEDS_REVIEW = "needs_review"
    NO_MATCH = "no_match"


class MatchProposalRead(BaseModel):
    ledger_row_id: int
    row_number: int
    job_name: str
    matched_label: str | None = None
    score: int = 0
    status: MatchStatusDTO
    needs_review: bool
    shift_count: int = 0
    confirmed_label: str | None = None


class UnmatchedLabelRead(BaseModel):
    model_config = {"from_attributes": True}

    job_label: str
    shift_count: int
    total_hours: float
    crew_count: int = 0


class ProposalList(BaseModel):
    batch_id: str
    min_confidence: int
    items: list[MatchProposalRead]
    unmatched: list[UnmatchedLabelRead]
    total: int


class MatchConfirmation(BaseModel):
    raw_label: str
    ledger_row_id: int | None = None

    @field_validator("raw_label")
    @classmethod
    def raw_label_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("raw_label must not be empty")
        return v


class ConfirmRequest(BaseModel):
    matches: list[MatchConfirmation]


class ConfirmResult(BaseModel):
    status: str = "ok"
    update_count: int
