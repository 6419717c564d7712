"""Expand one cycle-start date into phase windows and point milestones.

``compute_windows_from_seed`` is the pure day-offset model: species constants
plus one anchor date in, windows out. ``build_timeline_from_seed`` wraps it
with the animal's species lookup and the point milestones a plan needs.

Every window has a ``full`` range (everything plausible) and a narrower
``likely`` range. ``likely`` is always clamped inside ``full``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from repro_planner.dates import add_days, parse_iso_date
from repro_planner.engine.registry import REPRO_DEFAULTS, SpeciesRegistry

if TYPE_CHECKING:
    from repro_planner.reference.species import SpeciesReproDefaults
    from repro_planner.schemas import ReproSummary

PHASE_LABELS: dict[str, str] = {
    "pre_breeding": "Pre-breeding Heat",
    "hormone_testing": "Hormone Testing",
    "breeding": "Breeding",
    "birth": "Birth",
    "offspring_care": "Offspring Care",
    "placement_normal": "Placement, Normal",
    "placement_extended": "Placement, Extended",
    "availability_travel_risky": "Travel Risky",
    "availability_travel_unlikely": "Travel Unlikely",
}

MILESTONE_NAMES = (
    "cycle_start",
    "ovulation",
    "expected_breeding",
    "expected_birth",
    "expected_weaning",
    "expected_placement_start",
    "expected_placement_completed",
    "expected_extended_placement_end",
)


class SeedType(StrEnum):
    ACTUAL = "ACTUAL"
    PROJECTED = "PROJECTED"
    ACTUAL_BIRTH = "ACTUAL_BIRTH"


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    @classmethod
    def between(cls, a: date, b: date) -> DateRange:
        """Range spanning two dates in either order."""
        return cls(a, b) if a <= b else cls(b, a)

    @classmethod
    def around(cls, center: date, half_width_days: int) -> DateRange:
        return cls.between(add_days(center, -half_width_days), add_days(center, half_width_days))

    @classmethod
    def point(cls, d: date) -> DateRange:
        return cls(d, d)

    def contains(self, other: DateRange) -> bool:
        return self.start <= other.start and other.end <= self.end

    def clamped_to(self, outer: DateRange) -> DateRange:
        """Intersection with ``outer``; all of ``outer`` when they don't overlap."""
        start = max(self.start, outer.start)
        end = min(self.end, outer.end)
        if start > end:
            return outer
        return DateRange(start, end)

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class PhaseWindow:
    full: DateRange
    likely: DateRange

    @classmethod
    def nested(cls, full: DateRange, likely: DateRange | None = None) -> PhaseWindow:
        """Window whose likely range is forced inside ``full``."""
        return cls(full, full if likely is None else likely.clamped_to(full))


@dataclass(frozen=True)
class ReproTimeline:
    seed_cycle_start: date
    milestones: dict[str, date | None] = field(default_factory=dict)
    windows: dict[str, PhaseWindow] = field(default_factory=dict)
    explain: dict[str, str] = field(default_factory=dict)


def coerce_seed(value: date | str, label: str = "seed") -> date:
    """Accept a date or strict ``YYYY-MM-DD`` string; raise ValueError otherwise."""
    parsed = parse_iso_date(value)
    if parsed is None:
        msg = f"{label} must be an ISO date (YYYY-MM-DD), got: {value!r}"
        raise ValueError(msg)
    return parsed


def compute_windows_from_seed(defaults: SpeciesReproDefaults, seed: date) -> dict[str, PhaseWindow]:
    """Day-offset windows anchored on a cycle (heat) start.

    Args:
        defaults: Species timing constants.
        seed: Cycle start / heat start.

    Returns:
        Phase name -> PhaseWindow, including the two-segment availability
        (travel) bands.
    """
    heat = seed
    ovulation = add_days(heat, defaults.ovulation_offset_days)
    care_days = defaults.offspring_care_duration_weeks * 7
    placement_days = defaults.placement_start_weeks_default * 7

    pre_full = DateRange.between(add_days(heat, -defaults.start_buffer_days), add_days(ovulation, -1))
    pre_likely = DateRange.around(heat, 5)

    hormone_full = DateRange.between(add_days(heat, 7), ovulation)
    hormone_likely = DateRange.between(add_days(pre_likely.end, 1), add_days(pre_likely.end, 7))

    breeding_full = DateRange.between(add_days(ovulation, -1), add_days(ovulation, 2))
    breeding_likely = DateRange.between(ovulation, add_days(ovulation, 1))

    birth_center = add_days(ovulation, defaults.gestation_days)
    birth_full = DateRange.around(birth_center, 2)
    birth_likely = DateRange.around(birth_center, 1)

    care_full = DateRange.between(birth_full.start, add_days(birth_full.end, care_days))
    care_likely = DateRange.between(birth_likely.start, add_days(birth_likely.start, care_days))

    placement_full = DateRange.between(
        add_days(birth_full.start, placement_days), add_days(birth_full.end, placement_days)
    )
    placement_likely = DateRange.around(add_days(birth_likely.start, placement_days), 1)

    extended_full = DateRange.between(
        placement_full.end, add_days(placement_full.end, defaults.placement_extended_weeks * 7)
    )

    risky_1 = DateRange.between(hormone_full.start, breeding_full.end)
    risky_2 = DateRange.between(birth_full.start, extended_full.end)
    unlikely_1 = DateRange.between(hormone_likely.start, breeding_likely.end)
    unlikely_2 = DateRange.between(care_likely.start, placement_likely.end)

    return {
        "pre_breeding": PhaseWindow.nested(pre_full, pre_likely),
        "hormone_testing": PhaseWindow.nested(hormone_full, hormone_likely),
        "breeding": PhaseWindow.nested(breeding_full, breeding_likely),
        "birth": PhaseWindow.nested(birth_full, birth_likely),
        "offspring_care": PhaseWindow.nested(care_full, care_likely),
        "placement_normal": PhaseWindow.nested(placement_full, placement_likely),
        # No separate likely overlay for extended placement
        "placement_extended": PhaseWindow.nested(extended_full),
        "availability_travel_risky_1": PhaseWindow.nested(risky_1),
        "availability_travel_risky_2": PhaseWindow.nested(risky_2),
        "availability_travel_unlikely_1": PhaseWindow.nested(unlikely_1),
        "availability_travel_unlikely_2": PhaseWindow.nested(unlikely_2),
    }


def build_timeline_from_seed(
    summary: ReproSummary,
    seed_cycle_start: date | str,
    seed_type: SeedType = SeedType.ACTUAL,
    registry: SpeciesRegistry[SpeciesReproDefaults] = REPRO_DEFAULTS,
) -> ReproTimeline:
    """Full timeline from a locked cycle start or a projected "what-if" date."""
    seed = coerce_seed(seed_cycle_start, "seed_cycle_start")
    defaults = registry.get(summary.species)
    windows = compute_windows_from_seed(defaults, seed)

    ovulation = add_days(seed, defaults.ovulation_offset_days)
    birth = add_days(ovulation, defaults.gestation_days)
    milestones: dict[str, date | None] = {
        "cycle_start": seed,
        "ovulation": ovulation,
        "expected_breeding": windows["breeding"].likely.start,
        "expected_birth": birth,
        "expected_weaning": add_days(birth, defaults.offspring_care_duration_weeks * 7),
        "expected_placement_start": add_days(birth, defaults.placement_start_weeks_default * 7),
        "expected_placement_completed": windows["placement_normal"].full.end,
        "expected_extended_placement_end": windows["placement_extended"].full.end,
    }

    return ReproTimeline(
        seed_cycle_start=seed,
        milestones=milestones,
        windows=windows,
        explain={"species": summary.species, "seed_type": seed_type.value},
    )


def build_timeline_from_birth(
    summary: ReproSummary,
    actual_birth: date | str,
    registry: SpeciesRegistry[SpeciesReproDefaults] = REPRO_DEFAULTS,
) -> ReproTimeline:
    """Post-birth windows recomputed from a recorded birth.

    Only birth, offspring care and placement windows are produced; pre-birth
    milestones are None.
    """
    birth = coerce_seed(actual_birth, "actual_birth")
    defaults = registry.get(summary.species)

    weaning = add_days(birth, defaults.offspring_care_duration_weeks * 7)
    placement_start = add_days(birth, defaults.placement_start_weeks_default * 7)
    extended_end = add_days(placement_start, defaults.placement_extended_weeks * 7)

    windows = {
        "birth": PhaseWindow.nested(DateRange.point(birth)),
        "offspring_care": PhaseWindow.nested(DateRange.between(birth, weaning)),
        "placement_normal": PhaseWindow.nested(DateRange.point(placement_start)),
        "placement_extended": PhaseWindow.nested(DateRange.between(placement_start, extended_end)),
    }
    milestones: dict[str, date | None] = dict.fromkeys(MILESTONE_NAMES)
    milestones.update(
        expected_birth=birth,
        expected_weaning=weaning,
        expected_placement_start=placement_start,
        expected_placement_completed=placement_start,
        expected_extended_placement_end=extended_end,
    )

    return ReproTimeline(
        seed_cycle_start=birth,
        milestones=milestones,
        windows=windows,
        explain={"species": summary.species, "seed_type": SeedType.ACTUAL_BIRTH.value},
    )


def flatten_timeline(timeline: ReproTimeline) -> dict[str, Any]:
    """Flat ``<phase>_full`` / ``<phase>_likely`` mapping plus ISO milestones."""
    flat: dict[str, Any] = {}
    for name, window in timeline.windows.items():
        flat[f"{name}_full"] = window.full.to_dict()
        flat[f"{name}_likely"] = window.likely.to_dict()
    for name, value in timeline.milestones.items():
        flat[name] = value.isoformat() if value is not None else None
    return flat
