"""Time-clock export parser.

All header guessing lives here: callers get typed ``RawShift`` records and
never see raw spreadsheet rows.
"""
from __future__ import annotations
import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable
from openpyxl import load_workbook
from openpyxl.utils.datetime import from_excel
from crewhours.domain.exceptions import EmptyExportError
from crewhours.reconcile.timecodes import has_delivery_drop_tag, has_qc_tag, shift_hours

logger = logging.getLogger(__name__)

HEADER_SCAN_ROWS = 5
DEFAULT_HEADER_INDEX = 1

# export header text -> RawShift field
COLUMNS = {
    "Date": "shift_date",
    "Job": "job_label",
    "Name": "crew_member_name",
    "Tags": "tags",
    "Regular Time": "regular_time_raw",
    "OT": "ot_raw",
    "2OT": "ot2_raw",
    "PTO": "pto_raw",
    "Total Work Time": "total_work_time_raw",
    "Notes": "notes",
}

_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%Y-%m-%d", "%a, %b %d, %Y", "%b %d, %Y", "%d-%b-%Y")
_XLSX_MAGIC = b"PK\x03\x04"


@dataclass(frozen=True)
class RawShift:
    source_row: int
    shift_date: date | None
    job_label: str
    crew_member_name: str
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


@dataclass
class ParsedExport:
    shifts: list[RawShift]
    header_row: int
    column_map: dict[str, int] = field(default_factory=dict)
    total_rows: int = 0


def parse_export(buffer: bytes) -> ParsedExport:
    """Parse an ``.xlsx`` or delimited-text export into ``RawShift`` records.

    Raises:
        EmptyExportError: no rows with a job label survived filtering.
    """
    if not buffer:
        raise EmptyExportError("Export file is empty")

    rows = _read_xlsx(buffer) if buffer[:4] == _XLSX_MAGIC else _read_delimited(buffer)
    # keep 1-based source positions; blank rows are dropped from the scan
    numbered = [(pos, row) for pos, row in enumerate(rows, start=1) if _has_content(row)]
    if len(numbered) < 2:
        raise EmptyExportError("Export file has insufficient data")

    header_idx = find_header_row([row for _, row in numbered])
    header_pos, header = numbered[header_idx]
    column_map = map_columns(header)
    logger.info("Export header detected at row %d: %s", header_pos, column_map)

    shifts: list[RawShift] = []
    for pos, row in numbered[header_idx + 1:]:
        shift = _build_shift(pos, row, column_map)
        if shift is not None:
            shifts.append(shift)

    logger.info("Parsed %d shift(s) from %d export row(s)", len(shifts), len(rows))
    if not shifts:
        raise EmptyExportError("No valid shifts found in export")

    return ParsedExport(shifts=shifts, header_row=header_pos, column_map=column_map, total_rows=len(rows))


def find_header_row(rows: list[list[Any]]) -> int:
    """Index of the first row (of the first five) whose first cell mentions a date/day."""
    for i, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        if row:
            first = cell_text(row[0]).lower()
            if "date" in first or "day" in first:
                return i
    return DEFAULT_HEADER_INDEX


def map_columns(header: Iterable[Any]) -> dict[str, int]:
    """Exact header text -> column index, for the headers we know about."""
    column_map: dict[str, int] = {}
    for index, value in enumerate(header):
        text = cell_text(value)
        if text in COLUMNS and text not in column_map:
            column_map[text] = index
    return column_map


def _build_shift(pos: int, row: list[Any], column_map: dict[str, int]) -> RawShift | None:
    def get(header: str) -> Any:
        idx = column_map.get(header)
        if idx is None or idx >= len(row):
            return ""
        return row[idx]

    job_label = cell_text(get("Job"))
    if not job_label or job_label.lower() == "job":
        return None

    tags = cell_text(get("Tags"))
    regular_raw = cell_text(get("Regular Time"))
    ot_raw = cell_text(get("OT"))
    ot2_raw = cell_text(get("2OT"))
    pto_raw = cell_text(get("PTO"))
    hours = shift_hours(regular_raw, ot_raw, ot2_raw, pto_raw)
    is_qc = has_qc_tag(tags)
    is_delivery_drop = has_delivery_drop_tag(tags)
    if is_qc or is_delivery_drop:
        logger.debug("Special tag on row %d (%s): %r", pos, job_label, tags)

    return RawShift(
        source_row=pos,
        shift_date=parse_date(get("Date")),
        job_label=job_label,
        crew_member_name=cell_text(get("Name")),
        tags=tags,
        regular_time_raw=regular_raw,
        ot_raw=ot_raw,
        ot2_raw=ot2_raw,
        pto_raw=pto_raw,
        total_work_time_raw=cell_text(get("Total Work Time")),
        notes=cell_text(get("Notes")),
        regular_hours=hours.regular_hours,
        ot_hours=hours.ot_hours,
        ot2_hours=hours.ot2_hours,
        pto_hours=hours.pto_hours,
        total_hours=hours.total_hours,
        is_qc=is_qc,
        is_delivery_drop=is_delivery_drop,
    )


def cell_text(value: Any) -> str:
    """Render a cell the way the clock report shows it."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, time):
        return f"{value.hour}:{value.minute:02d}"
    if isinstance(value, timedelta):
        minutes = int(round(value.total_seconds() / 60))
        return f"{minutes // 60}:{minutes % 60:02d}"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return from_excel(value).date()
        except (ValueError, OverflowError, TypeError):
            logger.warning("Failed to parse export date serial: %r", value)
            return None
    text = str(value).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    logger.warning("Failed to parse export date: %r", text)
    return None


def _has_content(row: list[Any]) -> bool:
    return any(cell_text(v) for v in row)


def _read_xlsx(buffer: bytes) -> list[list[Any]]:
    wb = load_workbook(io.BytesIO(buffer), read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        return [list(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _read_delimited(buffer: bytes) -> list[list[Any]]:
    text = buffer.decode("utf-8-sig", errors="replace")
    delimiter = "\t" if "\t" in text[:4096] else ","
    return [row for row in csv.reader(io.StringIO(text), delimiter=delimiter)]
