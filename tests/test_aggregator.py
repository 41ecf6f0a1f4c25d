"""Unit tests for shift aggregation and the special-shift policy."""
from dataclasses import dataclass
from crewhours.domain.status import SpecialShiftType
from crewhours.reconcile.aggregator import JobRef, aggregate_shifts, classify


@dataclass
class Shift:
    job_label: str
    crew_member_name: str
    regular_hours: float = 0.0
    ot_hours: float = 0.0
    ot2_hours: float = 0.0
    tags: str = ""
    is_qc: bool = False
    is_delivery_drop: bool = False

    @property
    def total_hours(self) -> float:
        return round(self.regular_hours + self.ot_hours + self.ot2_hours, 2)


LORIE = JobRef(id=7, job_name="Lorie Scholten")


def _by_display(result):
    return {line.display_name: line for line in result.lines}


def test_regular_shifts_roll_up_per_crew_member():
    shifts = [
        Shift("Lorie Scholten", "Drew Gipson (D)", regular_hours=4.5, tags="Drive"),
        Shift("Lorie Scholten", "Drew Gipson (D)", regular_hours=5.0, ot_hours=1.5, tags="Drive, Attic"),
        Shift("Lorie Scholten", "Sam Lee", regular_hours=2.0),
    ]
    result = aggregate_shifts(shifts, {"Lorie Scholten": LORIE})
    lines = _by_display(result)
    drew = lines["Drew Gipson"]
    assert drew.job_id == 7
    assert drew.shift_count == 2
    assert drew.regular_hours == 9.5
    assert drew.ot_hours == 1.5
    assert drew.total_hours == 11.0
    assert drew.tags == "Drive, Attic"
    assert drew.has_special is False
    assert lines["Sam Lee"].total_hours == 2.0


def test_special_shifts_use_fixed_hours():
    shifts = [
        Shift("Lorie Scholten", f"Crew {i}", regular_hours=7.75, ot_hours=3.0, tags="QC", is_qc=True)
        for i in range(4)
    ]
    line = aggregate_shifts(shifts, {"Lorie Scholten": LORIE}).lines[0]
    assert line.display_name == "QC Special Shift"
    assert line.special_type is SpecialShiftType.QC
    assert line.has_special is True
    assert line.shift_count == 4
    assert line.total_hours == 12.0
    assert line.regular_hours == 12.0
    assert line.ot_hours == 0.0
    assert line.ot2_hours == 0.0


def test_qc_takes_precedence_over_delivery_drop():
    shift = Shift("Lorie Scholten", "Sam Lee", is_qc=True, is_delivery_drop=True)
    assert classify(shift) is SpecialShiftType.QC
    assert classify(Shift("x", "y", is_delivery_drop=True)) is SpecialShiftType.DELIVERY_DROP
    assert classify(Shift("x", "y")) is None


def test_delivery_drop_bucket_name():
    shifts = [Shift("Lorie Scholten", "Sam Lee", regular_hours=1.0, is_delivery_drop=True)]
    line = aggregate_shifts(shifts, {"Lorie Scholten": LORIE}).lines[0]
    assert line.display_name == "Job Delivery Special Shift"
    assert line.total_hours == 3.0


def test_unconfirmed_labels_are_held_aside():
    shifts = [
        Shift("Lorie Scholten", "Drew Gipson", regular_hours=4.0),
        Shift("Mystery Job", "Sam Lee", regular_hours=2.5),
        Shift("Mystery Job", "Sam Lee", regular_hours=1.0),
        Shift("Declined Job", "Sam Lee", regular_hours=1.0),
    ]
    result = aggregate_shifts(shifts, {"Lorie Scholten": LORIE, "Declined Job": None})
    assert [line.display_name for line in result.lines] == ["Drew Gipson"]
    held = {u.job_label: u for u in result.unmatched}
    assert held["Mystery Job"].shift_count == 2
    assert held["Mystery Job"].total_hours == 3.5
    assert "Declined Job" in held


def test_regular_totals_equal_per_shift_totals():
    shifts = [
        Shift("Lorie Scholten", "A B", regular_hours=1.11, ot_hours=0.33),
        Shift("Lorie Scholten", "C D", regular_hours=2.22),
        Shift("Lorie Scholten", "A B", regular_hours=3.33, ot2_hours=1.0),
        Shift("Lorie Scholten", "E F", regular_hours=9.0, is_qc=True),
    ]
    result = aggregate_shifts(shifts, {"Lorie Scholten": LORIE})
    regular = sum(line.total_hours for line in result.lines if not line.has_special)
    expected = sum(s.total_hours for s in shifts if not s.is_qc)
    assert round(regular, 2) == round(expected, 2)


def test_aggregation_is_idempotent():
    shifts = [
        Shift("Lorie Scholten", "Drew Gipson", regular_hours=4.5, tags="QC", is_qc=True),
        Shift("Lorie Scholten", "Sam Lee", regular_hours=2.0),
    ]
    confirmed = {"Lorie Scholten": LORIE}
    assert aggregate_shifts(shifts, confirmed) == aggregate_shifts(shifts, confirmed)


def test_special_hours_are_configurable():
    shifts = [Shift("Lorie Scholten", "Sam Lee", is_qc=True)] * 2
    line = aggregate_shifts(shifts, {"Lorie Scholten": LORIE}, special_hours=2.5).lines[0]
    assert line.total_hours == 5.0
