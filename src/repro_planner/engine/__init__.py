"""Reproductive-timeline engine: pure functions over already-loaded data.

Dependency rule: engine/ imports reference data and ``schemas`` only. It never
fetches, never logs, and never reads the system clock; the caller supplies
``today``.

Modules:
  - registry: runtime-extensible species tables (timing + biology bounds)
  - cycle_length: history/biology blend -> effective cycle length
  - projection: effective length + seed rules -> upcoming cycle starts
  - timeline: one seed date -> phase windows and point milestones

Adding a species
----------------
Call ``REPRO_DEFAULTS.register("ALPACA", SpeciesReproDefaults(...))`` and
``BIOLOGY_RULES.register("ALPACA", SpeciesBiologyRules(...))`` at startup.
Unknown species fall back to DOG until registered.
"""

from repro_planner.engine.cycle_length import (
    CycleLenSource,
    CycleLenWeighting,
    EffectiveCycleLenResult,
    compute_effective_cycle_len,
)
from repro_planner.engine.projection import (
    ProjectedCycleStart,
    ProjectionResult,
    ProjectionSource,
    project_upcoming_cycle_starts,
)
from repro_planner.engine.registry import (
    BIOLOGY_RULES,
    REPRO_DEFAULTS,
    SpeciesRegistry,
    resolve_biology_rules,
)
from repro_planner.engine.timeline import (
    DateRange,
    PhaseWindow,
    ReproTimeline,
    SeedType,
    build_timeline_from_birth,
    build_timeline_from_seed,
    compute_windows_from_seed,
    flatten_timeline,
)

__all__ = [
    "BIOLOGY_RULES",
    "REPRO_DEFAULTS",
    "CycleLenSource",
    "CycleLenWeighting",
    "DateRange",
    "EffectiveCycleLenResult",
    "PhaseWindow",
    "ProjectedCycleStart",
    "ProjectionResult",
    "ProjectionSource",
    "ReproTimeline",
    "SeedType",
    "SpeciesRegistry",
    "build_timeline_from_birth",
    "build_timeline_from_seed",
    "compute_effective_cycle_len",
    "compute_windows_from_seed",
    "flatten_timeline",
    "project_upcoming_cycle_starts",
    "resolve_biology_rules",
]
