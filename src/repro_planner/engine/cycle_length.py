"""Effective cycle-length estimation.

Blends an animal's observed cycle gaps with the species default::

    gaps      = positive day-gaps between consecutive cycle starts
    recent    = last (up to) 3 gaps
    observed  = round(mean(recent))
    w_obs     = 1.0 (3 gaps) | 0.67 (2 gaps) | 0.50 (1 gap)
    history   = round(observed * w_obs + species_default * (1 - w_obs))

Precedence: a positive per-animal override always wins; otherwise the
history blend; otherwise the species default. When an override is used and
history was available, ``warning_conflict`` flags a >20% disagreement.

No clock reads, no randomness: identical inputs give identical provenance,
which UIs show verbatim.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from repro_planner.dates import days_between, round_half_up
from repro_planner.engine.registry import REPRO_DEFAULTS, SpeciesRegistry

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from repro_planner.reference.species import SpeciesReproDefaults

RECENT_GAP_COUNT = 3
CONFLICT_THRESHOLD = 0.20

# Observed-history weight by number of gaps used
OBSERVED_WEIGHTS: dict[int, float] = {1: 0.50, 2: 0.67, 3: 1.0}


class CycleLenSource(StrEnum):
    OVERRIDE = "OVERRIDE"
    HISTORY = "HISTORY"
    BIOLOGY = "BIOLOGY"


@dataclass(frozen=True)
class CycleLenWeighting:
    observed: float
    biology: float


@dataclass(frozen=True)
class EffectiveCycleLenResult:
    """Resolved cycle length with the provenance needed to explain it."""

    effective_cycle_len_days: int
    source: CycleLenSource
    gaps_used_days: list[int] = field(default_factory=list)
    weighting: CycleLenWeighting = field(default_factory=lambda: CycleLenWeighting(0.0, 1.0))
    observed_avg_days: int | None = None
    history_based_days: int | None = None
    warning_conflict: bool = False


def positive_gaps(cycle_starts_asc: Sequence[date]) -> list[int]:
    """Day gaps between consecutive starts; zero and negative gaps are dropped."""
    gaps = (days_between(a, b) for a, b in zip(cycle_starts_asc, cycle_starts_asc[1:], strict=False))
    return [g for g in gaps if g > 0]


def is_valid_cycle_len(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def compute_effective_cycle_len(
    species: str,
    cycle_starts_asc: Sequence[date],
    override_days: float | None = None,
    registry: SpeciesRegistry[SpeciesReproDefaults] = REPRO_DEFAULTS,
) -> EffectiveCycleLenResult:
    """Estimate how long this animal's cycle currently runs.

    Args:
        species: Species code; unknown codes use the registry default species.
        cycle_starts_asc: Canonical ascending cycle-start dates.
        override_days: Optional per-animal override; ignored unless positive.
        registry: Species timing constants.
    """
    bio = registry.get(species).cycle_len_days
    recent = positive_gaps(cycle_starts_asc)[-RECENT_GAP_COUNT:]

    observed: int | None = None
    history_based: int | None = None
    weighting = CycleLenWeighting(observed=0.0, biology=1.0)
    if recent:
        w_obs = OBSERVED_WEIGHTS[len(recent)]
        observed = round_half_up(sum(recent) / len(recent))
        history_based = round_half_up(observed * w_obs + bio * (1 - w_obs))
        weighting = CycleLenWeighting(observed=w_obs, biology=round(1 - w_obs, 2))

    if override_days is not None and is_valid_cycle_len(override_days):
        effective = round_half_up(override_days)
        conflict = False
        if history_based:
            conflict = abs(effective - history_based) / history_based > CONFLICT_THRESHOLD
        return EffectiveCycleLenResult(
            effective_cycle_len_days=effective,
            source=CycleLenSource.OVERRIDE,
            gaps_used_days=recent,
            weighting=weighting,
            observed_avg_days=observed,
            history_based_days=history_based,
            warning_conflict=conflict,
        )

    if history_based is not None:
        return EffectiveCycleLenResult(
            effective_cycle_len_days=history_based,
            source=CycleLenSource.HISTORY,
            gaps_used_days=recent,
            weighting=weighting,
            observed_avg_days=observed,
            history_based_days=history_based,
        )

    return EffectiveCycleLenResult(effective_cycle_len_days=bio, source=CycleLenSource.BIOLOGY)
