"""Static reference data: species reproduction constants and milestone labels."""

from repro_planner.reference.species import (
    DEFAULT_SPECIES,
    SPECIES_BIOLOGY_DEFAULTS,
    SPECIES_REPRO_DEFAULTS,
    SpeciesBiologyRules,
    SpeciesReproDefaults,
)

__all__ = [
    "DEFAULT_SPECIES",
    "SPECIES_BIOLOGY_DEFAULTS",
    "SPECIES_REPRO_DEFAULTS",
    "SpeciesBiologyRules",
    "SpeciesReproDefaults",
]
