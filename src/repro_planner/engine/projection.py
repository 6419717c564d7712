"""Project a female's upcoming cycle-start dates.

Seed selection, in priority order:

  1. HISTORY   last recorded cycle start + effective cycle length
  2. JUVENILE  date of birth + species "likely first cycle" age
  3. BIOLOGY   today + species cycle length

If a last birth is known and ``last_birth + postpartum_likely_days`` falls
later than the chosen seed, the seed moves to that date. A history seed keeps
its HISTORY tag; a juvenile/biology seed is re-tagged POSTPARTUM.

From the seed, dates step forward by the effective length (history present)
or the plain species length when there is no history.

Horizon: ``today + horizon_months * 30`` days. Months are a flat 30 days here,
not calendar months.

Clamping: a candidate before ``today`` is raised to ``today``, and the next
step is taken from the clamped date. Later dates never "catch up" to the
original arithmetic sequence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING

from repro_planner.dates import add_days
from repro_planner.engine.cycle_length import (
    EffectiveCycleLenResult,
    compute_effective_cycle_len,
    is_valid_cycle_len,
)
from repro_planner.engine.registry import REPRO_DEFAULTS, SpeciesRegistry

if TYPE_CHECKING:
    from repro_planner.reference.species import SpeciesReproDefaults
    from repro_planner.schemas import ReproSummary

DAYS_PER_MONTH_APPROX = 30


class ProjectionSource(StrEnum):
    POSTPARTUM = "POSTPARTUM"
    HISTORY = "HISTORY"
    BIOLOGY = "BIOLOGY"
    JUVENILE = "JUVENILE"


@dataclass(frozen=True)
class ProjectedCycleStart:
    date: date
    source: ProjectionSource
    rationale: str


@dataclass(frozen=True)
class ProjectionResult:
    """Projected starts plus the cycle-length estimate they were built from."""

    effective: EffectiveCycleLenResult
    projected: list[ProjectedCycleStart] = field(default_factory=list)
    step_days: int | None = None
    horizon_end: date | None = None

    @property
    def dates(self) -> list[date]:
        return [p.date for p in self.projected]


@dataclass(frozen=True)
class _Seed:
    date: date
    source: ProjectionSource
    rationale: str


def horizon_end(today: date, horizon_months: int) -> date:
    """Last date a projection may fall on (30-day months)."""
    return add_days(today, horizon_months * DAYS_PER_MONTH_APPROX)


def _choose_seed(
    summary: ReproSummary,
    defaults: SpeciesReproDefaults,
    effective_len: int,
) -> _Seed:
    postpartum_likely = (
        add_days(summary.last_birth, defaults.postpartum_likely_days)
        if summary.last_birth is not None
        else None
    )

    last_start = summary.last_cycle_start
    if last_start is not None:
        seed = _Seed(
            add_days(last_start, effective_len),
            ProjectionSource.HISTORY,
            f"last cycle start {last_start.isoformat()} + {effective_len} days",
        )
    elif summary.dob is not None:
        seed = _Seed(
            add_days(summary.dob, defaults.juvenile_first_cycle_likely_days),
            ProjectionSource.JUVENILE,
            f"date of birth {summary.dob.isoformat()} + "
            f"{defaults.juvenile_first_cycle_likely_days} days (likely first cycle)",
        )
    else:
        seed = _Seed(
            add_days(summary.today, defaults.cycle_len_days),
            ProjectionSource.BIOLOGY,
            f"today + species cycle length of {defaults.cycle_len_days} days",
        )

    if postpartum_likely is not None and postpartum_likely > seed.date:
        shifted_source = (
            ProjectionSource.HISTORY
            if seed.source is ProjectionSource.HISTORY
            else ProjectionSource.POSTPARTUM
        )
        seed = _Seed(
            postpartum_likely,
            shifted_source,
            f"{seed.rationale}; shifted to postpartum return "
            f"(last birth {summary.last_birth} + {defaults.postpartum_likely_days} days)",
        )
    return seed


def project_upcoming_cycle_starts(
    summary: ReproSummary,
    horizon_months: int = 12,
    max_count: int = 8,
    registry: SpeciesRegistry[SpeciesReproDefaults] = REPRO_DEFAULTS,
) -> ProjectionResult:
    """Project the next cycle starts for one female.

    Args:
        summary: Animal history and the caller's ``today``.
        horizon_months: How far ahead to project (30-day months).
        max_count: Maximum number of dates returned.
        registry: Species timing constants.

    Returns:
        ProjectionResult. ``projected`` is empty when no valid cycle length
        can be resolved, ``max_count`` is not positive, or the seed lies past
        the horizon.
    """
    defaults = registry.get(summary.species)
    effective = compute_effective_cycle_len(
        summary.species,
        summary.cycle_starts_asc,
        summary.cycle_len_override_days,
        registry=registry,
    )

    effective_len = effective.effective_cycle_len_days
    if not is_valid_cycle_len(effective_len):
        effective_len = defaults.cycle_len_days
    if not is_valid_cycle_len(effective_len):
        return ProjectionResult(effective=effective)

    has_history = bool(summary.cycle_starts_asc)
    step = int(effective_len) if has_history else int(defaults.cycle_len_days)
    end = horizon_end(summary.today, horizon_months)
    seed = _choose_seed(summary, defaults, int(effective_len))

    projected: list[ProjectedCycleStart] = []
    current = seed.date
    index = 0
    while len(projected) < max_count:
        rationale = seed.rationale if index == 0 else f"previous projection + {step} days"
        if current < summary.today:
            current = summary.today
            rationale = f"{rationale}; clamped to today"
        if current > end:
            break
        projected.append(ProjectedCycleStart(current, seed.source, rationale))

        following = add_days(current, step)
        if following <= current:
            break
        current = following
        index += 1

    return ProjectionResult(effective=effective, projected=projected, step_days=step, horizon_end=end)
