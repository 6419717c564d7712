"""Tests for the phase timeline builder."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from repro_planner.engine.registry import REPRO_DEFAULTS
from repro_planner.engine.timeline import (
    MILESTONE_NAMES,
    DateRange,
    PhaseWindow,
    SeedType,
    build_timeline_from_birth,
    build_timeline_from_seed,
    compute_windows_from_seed,
    flatten_timeline,
)
from repro_planner.schemas import ReproSummary

SEED = date(2024, 1, 1)


def _summary(species: str = "DOG") -> ReproSummary:
    return ReproSummary(animal_id="a1", species=species, today=date(2024, 1, 1))


class TestDateRange:
    def test_between_orders_endpoints(self) -> None:
        r = DateRange.between(date(2024, 2, 1), date(2024, 1, 1))
        assert (r.start, r.end) == (date(2024, 1, 1), date(2024, 2, 1))

    def test_clamped_to_intersects(self) -> None:
        outer = DateRange(date(2024, 1, 1), date(2024, 1, 10))
        inner = DateRange(date(2024, 1, 5), date(2024, 1, 20))
        assert inner.clamped_to(outer) == DateRange(date(2024, 1, 5), date(2024, 1, 10))

    def test_clamped_to_disjoint_uses_outer(self) -> None:
        outer = DateRange(date(2024, 1, 1), date(2024, 1, 10))
        inner = DateRange(date(2024, 2, 1), date(2024, 2, 3))
        assert inner.clamped_to(outer) == outer

    def test_nested_window(self) -> None:
        full = DateRange(date(2024, 1, 1), date(2024, 1, 10))
        window = PhaseWindow.nested(full, DateRange(date(2023, 12, 25), date(2024, 1, 3)))
        assert window.full.contains(window.likely)
        assert window.likely.start == date(2024, 1, 1)


class TestWindowsFromSeed:
    """Day-offset windows for a known seed."""

    def test_dog_offsets(self) -> None:
        windows = compute_windows_from_seed(REPRO_DEFAULTS.get("DOG"), SEED)
        ovulation = SEED + timedelta(days=12)
        birth = ovulation + timedelta(days=63)

        assert windows["pre_breeding"].full == DateRange(SEED - timedelta(days=14), ovulation - timedelta(days=1))
        assert windows["breeding"].full == DateRange(ovulation - timedelta(days=1), ovulation + timedelta(days=2))
        assert windows["breeding"].likely == DateRange(ovulation, ovulation + timedelta(days=1))
        assert windows["birth"].full == DateRange(birth - timedelta(days=2), birth + timedelta(days=2))
        assert windows["birth"].likely == DateRange(birth - timedelta(days=1), birth + timedelta(days=1))
        assert windows["offspring_care"].full.end == birth + timedelta(days=2 + 42)
        assert windows["placement_normal"].full == DateRange(
            birth - timedelta(days=2 - 56), birth + timedelta(days=2 + 56)
        )

    @pytest.mark.parametrize("species", ["DOG", "CAT", "HORSE", "GOAT", "RABBIT", "SHEEP"])
    def test_likely_always_inside_full(self, species: str) -> None:
        windows = compute_windows_from_seed(REPRO_DEFAULTS.get(species), SEED)
        for name, window in windows.items():
            assert window.full.start <= window.full.end, name
            assert window.full.contains(window.likely), name

    def test_availability_bands(self) -> None:
        windows = compute_windows_from_seed(REPRO_DEFAULTS.get("DOG"), SEED)
        assert windows["availability_travel_risky_1"].full.start == windows["hormone_testing"].full.start
        assert windows["availability_travel_risky_1"].full.end == windows["breeding"].full.end
        assert windows["availability_travel_risky_2"].full.end == windows["placement_extended"].full.end


class TestBuildTimelineFromSeed:
    """Milestones and explain block."""

    def test_milestones(self) -> None:
        timeline = build_timeline_from_seed(_summary(), "2024-01-01")
        ovulation = SEED + timedelta(days=12)
        birth = ovulation + timedelta(days=63)

        assert timeline.seed_cycle_start == SEED
        assert timeline.milestones["cycle_start"] == SEED
        assert timeline.milestones["ovulation"] == ovulation
        assert timeline.milestones["expected_breeding"] == ovulation
        assert timeline.milestones["expected_birth"] == birth
        assert timeline.milestones["expected_weaning"] == birth + timedelta(weeks=6)
        assert timeline.milestones["expected_placement_start"] == birth + timedelta(weeks=8)
        assert set(timeline.milestones) == set(MILESTONE_NAMES)

    def test_explain(self) -> None:
        timeline = build_timeline_from_seed(_summary("cat"), SEED, SeedType.PROJECTED)
        assert timeline.explain == {"species": "CAT", "seed_type": "PROJECTED"}

    @pytest.mark.parametrize("bad", ["01/01/2024", "2024-02-30", "", "2024-01-01T00:00"])
    def test_invalid_seed_raises(self, bad: str) -> None:
        with pytest.raises(ValueError, match="ISO date"):
            build_timeline_from_seed(_summary(), bad)

    def test_flatten(self) -> None:
        flat = flatten_timeline(build_timeline_from_seed(_summary(), SEED))
        assert flat["cycle_start"] == "2024-01-01"
        assert flat["breeding_full"] == {"start": "2024-01-12", "end": "2024-01-15"}
        assert "placement_extended_likely" in flat


class TestBuildTimelineFromBirth:
    """Post-birth windows from a recorded birth."""

    def test_post_birth_windows(self) -> None:
        birth = date(2024, 3, 16)
        timeline = build_timeline_from_birth(_summary(), birth)

        assert timeline.explain["seed_type"] == "ACTUAL_BIRTH"
        assert timeline.milestones["cycle_start"] is None
        assert timeline.milestones["expected_birth"] == birth
        assert timeline.milestones["expected_weaning"] == birth + timedelta(weeks=6)
        assert timeline.windows["placement_extended"].full == DateRange(
            birth + timedelta(weeks=8), birth + timedelta(weeks=12)
        )
