"""Roll confirmed raw shifts up into one line per (job, crew member).

QC and delivery-drop shifts are pooled per job into a synthetic bucket whose
hours are fixed by policy (``shift_count * special_hours``) rather than by
clocked time.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Protocol
from crewhours.domain.status import SpecialShiftType
from crewhours.reconcile.names import clean_person_name

SPECIAL_SHIFT_HOURS = 3.0


class ShiftLike(Protocol):
    job_label: str
    crew_member_name: str
    tags: str
    regular_hours: float
    ot_hours: float
    ot2_hours: float
    total_hours: float
    is_qc: bool
    is_delivery_drop: bool


@dataclass(frozen=True)
class JobRef:
    id: int
    job_name: str


@dataclass
class AggregatedLine:
    job_id: int
    job_name: str
    display_name: str
    special_type: SpecialShiftType | None = None
    shift_count: int = 0
    regular_hours: float = 0.0
    ot_hours: float = 0.0
    ot2_hours: float = 0.0
    total_hours: float = 0.0
    tags: str = ""

    @property
    def has_special(self) -> bool:
        return self.special_type is not None


@dataclass
class UnmatchedLabel:
    job_label: str
    shift_count: int = 0
    total_hours: float = 0.0


@dataclass
class AggregationResult:
    lines: list[AggregatedLine] = field(default_factory=list)
    unmatched: list[UnmatchedLabel] = field(default_factory=list)


def classify(shift: ShiftLike) -> SpecialShiftType | None:
    """QC wins over delivery drop; anything else is a regular shift."""
    if shift.is_qc:
        return SpecialShiftType.QC
    if shift.is_delivery_drop:
        return SpecialShiftType.DELIVERY_DROP
    return None


def aggregate_shifts(
    shifts: Iterable[ShiftLike],
    confirmed: Mapping[str, JobRef | None],
    special_hours: float = SPECIAL_SHIFT_HOURS,
) -> AggregationResult:
    """Aggregate shifts whose label has a confirmed job; hold the rest aside."""
    lines: dict[tuple, AggregatedLine] = {}
    tags: dict[tuple, list[str]] = {}
    unmatched: dict[str, UnmatchedLabel] = {}

    for shift in shifts:
        job = confirmed.get(shift.job_label)
        if job is None:
            held = unmatched.setdefault(shift.job_label, UnmatchedLabel(job_label=shift.job_label))
            held.shift_count += 1
            held.total_hours += shift.total_hours or 0.0
            continue

        special = classify(shift)
        if special is not None:
            key = (job.id, special.value)
            display = special.display_name
        else:
            display = clean_person_name(shift.crew_member_name) or shift.crew_member_name.strip()
            key = (job.id, "REGULAR", display.lower())

        line = lines.get(key)
        if line is None:
            line = lines[key] = AggregatedLine(
                job_id=job.id, job_name=job.job_name, display_name=display, special_type=special,
            )
            tags[key] = []

        line.shift_count += 1
        if special is None:
            line.regular_hours += shift.regular_hours or 0.0
            line.ot_hours += shift.ot_hours or 0.0
            line.ot2_hours += shift.ot2_hours or 0.0
            line.total_hours += shift.total_hours or 0.0

        for tag in (shift.tags or "").split(","):
            tag = tag.strip()
            if tag and tag not in tags[key]:
                tags[key].append(tag)

    for key, line in lines.items():
        if line.has_special:
            apply_special_policy(line, special_hours)
        line.regular_hours = round(line.regular_hours, 2)
        line.ot_hours = round(line.ot_hours, 2)
        line.ot2_hours = round(line.ot2_hours, 2)
        line.total_hours = round(line.total_hours, 2)
        line.tags = ", ".join(tags[key])

    for held in unmatched.values():
        held.total_hours = round(held.total_hours, 2)

    return AggregationResult(lines=list(lines.values()), unmatched=list(unmatched.values()))


def apply_special_policy(line: AggregatedLine, special_hours: float = SPECIAL_SHIFT_HOURS) -> None:
    """Fixed duration per special shift, independent of clocked time."""
    fixed = round(line.shift_count * special_hours, 2)
    line.regular_hours = fixed
    line.total_hours = fixed
    line.ot_hours = 0.0
    line.ot2_hours = 0.0
