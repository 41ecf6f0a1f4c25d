"""Sync batch and ledger DTOs: pure Pydantic, zero ORM imports."""
from __future__ import annotations
from datetime import date, datetime
from pydantic import BaseModel, field_validator, model_validator


class BatchCreate(BaseModel):
    branch_id: int
    branch_name: str
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("branch_name")
    @classmethod
    def branch_name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("branch_name must not be empty")
        return v.strip()

    @model_validator(mode="after")
    def range_is_ordered(self) -> "BatchCreate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


class BatchRead(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    branch_id: int
    branch_name: str
    start_date: date | None = None
    end_date: date | None = None
    created_at: datetime | None = None


class BatchList(BaseModel):
    items: list[BatchRead]
    total: int


class LedgerRowIn(BaseModel):
    row_number: int
    job_name: str
    branch_id: int | None = None
    closing_date: date | None = None
    crew_leader: str | None = None
    estimated_hours: float | None = None
    sold_price: float | None = None

    @field_validator("job_name")
    @classmethod
    def job_name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("job_name must not be empty")
        return v.strip()


class LedgerRowsReplace(BaseModel):
    rows: list[LedgerRowIn]

    @field_validator("rows")
    @classmethod
    def row_numbers_unique(cls, v: list[LedgerRowIn]) -> list[LedgerRowIn]:
        numbers = [r.row_number for r in v]
        if len(numbers) != len(set(numbers)):
            raise ValueError("row_number values must be unique within a batch")
        return v


class LedgerRowRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    batch_id: str
    row_number: int
    job_name: str
    branch_id: int
    closing_date: date | None = None
    crew_leader: str | None = None
    estimated_hours: float | None = None
    sold_price: float | None = None


class LedgerRowList(BaseModel):
    items: list[LedgerRowRead]
    total: int
