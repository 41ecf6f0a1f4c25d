"""Batch-scoped staging tables: ledger rows, raw punches and confirmed matches."""
from datetime import date, datetime, timezone
from uuid import uuid4
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncBatch(SQLModel, table=True):
    """One reconciliation run: a branch and a date range."""
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    branch_id: int = Field(index=True)
    branch_name: str
    start_date: date | None = None
    end_date: date | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class LedgerJobRow(SQLModel, table=True):
    """Job row from the authoritative spreadsheet ledger."""
    __table_args__ = (UniqueConstraint("batch_id", "row_number"),)

    id: int | None = Field(default=None, primary_key=True)
    batch_id: str = Field(foreign_key="syncbatch.id", index=True)
    row_number: int
    job_name: str
    branch_id: int
    closing_date: date | None = None
    crew_leader: str | None = None
    estimated_hours: float | None = None
    sold_price: float | None = None


class RawShiftRecord(SQLModel, table=True):
    """One punch line from a time-clock export, with derived decimal hours."""
    id: int | None = Field(default=None, primary_key=True)
    batch_id: str = Field(foreign_key="syncbatch.id", index=True)
    upload_id: str = Field(index=True)
    source_row: int
    shift_date: date | None = None
    job_label: str = Field(index=True)
    crew_member_name: str = ""
    tags: str = ""
    regular_time_raw: str = ""
    ot_raw: str = ""
    ot2_raw: str = ""
    pto_raw: str = ""
    total_work_time_raw: str = ""
    notes: str = ""
    regular_hours: float = 0.0
    ot_hours: float = 0.0
    ot2_hours: float = 0.0
    pto_hours: float = 0.0
    total_hours: float = 0.0
    is_qc: bool = False
    is_delivery_drop: bool = False


class ConfirmedMatch(SQLModel, table=True):
    """Operator decision for a raw job label. A null ledger row means "no match"."""
    __table_args__ = (UniqueConstraint("batch_id", "job_label"),)

    id: int | None = Field(default=None, primary_key=True)
    batch_id: str = Field(foreign_key="syncbatch.id", index=True)
    job_label: str
    ledger_row_id: int | None = Field(default=None, foreign_key="ledgerjobrow.id")
    confirmed_at: datetime = Field(default_factory=_utcnow)
