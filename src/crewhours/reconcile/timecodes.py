"""Clock-string to decimal-hours conversion and special-shift tag detection."""
from __future__ import annotations
import logging
import math
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

OVERTIME_FACTOR = 1.5
DOUBLE_OVERTIME_FACTOR = 2.0

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_QC_RE = re.compile(r"\bQC\b", re.IGNORECASE)
_DELIVERY_DROP_RE = re.compile(r"\bdelivery\s+drop\b", re.IGNORECASE)


def convert(value: str | None) -> float:
    """Convert ``H:MM`` / ``HH:MM`` or a bare decimal string to hours.

    Never raises: anything unparsable is logged and counted as zero.
    """
    if value is None:
        return 0.0
    text = str(value).strip()
    if text in ("", "0", "00:00"):
        return 0.0

    m = _CLOCK_RE.match(text)
    if m:
        hours, minutes = int(m.group(1)), int(m.group(2))
        return round(hours + minutes / 60, 2)

    try:
        number = float(text)
    except ValueError:
        logger.warning("Could not parse time string: %r", text)
        return 0.0
    if not math.isfinite(number) or number < 0:
        logger.warning("Rejected time value: %r", text)
        return 0.0
    return round(number, 2)


def convert_overtime_x1_5(value: str | None) -> float:
    return round(convert(value) * OVERTIME_FACTOR, 2)


def convert_overtime_x2(value: str | None) -> float:
    return round(convert(value) * DOUBLE_OVERTIME_FACTOR, 2)


def has_qc_tag(tags: str | None) -> bool:
    return bool(tags) and _QC_RE.search(tags) is not None


def has_delivery_drop_tag(tags: str | None) -> bool:
    return bool(tags) and _DELIVERY_DROP_RE.search(tags) is not None


@dataclass(frozen=True)
class ShiftHours:
    regular_hours: float
    ot_hours: float
    ot2_hours: float
    pto_hours: float

    @property
    def total_hours(self) -> float:
        return round(self.regular_hours + self.ot_hours + self.ot2_hours + self.pto_hours, 2)


def shift_hours(regular: str | None, ot: str | None, ot2: str | None, pto: str | None) -> ShiftHours:
    """Decimal hours for one punch line. PTO is not scaled."""
    return ShiftHours(
        regular_hours=convert(regular),
        ot_hours=convert_overtime_x1_5(ot),
        ot2_hours=convert_overtime_x2(ot2),
        pto_hours=convert(pto),
    )
