"""Runtime-extensible species lookup tables.

Reads never lock: ``register`` builds a new table and swaps the reference,
so a concurrent ``get`` always sees either the old or the new table whole.
Writers are serialized with a lock.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING, Generic, TypeVar

from repro_planner.reference.species import (
    DEFAULT_SPECIES,
    SPECIES_BIOLOGY_DEFAULTS,
    SPECIES_REPRO_DEFAULTS,
    SpeciesBiologyRules,
    SpeciesReproDefaults,
)

if TYPE_CHECKING:
    from repro_planner.validation.models import SpeciesBiologyOverrides

T = TypeVar("T")


def species_key(species: str) -> str:
    return str(species).strip().upper()


class SpeciesRegistry(Generic[T]):
    """Species code -> constants, falling back to a default species."""

    def __init__(self, entries: Mapping[str, T], default_species: str = DEFAULT_SPECIES) -> None:
        table = {species_key(k): v for k, v in entries.items()}
        default_key = species_key(default_species)
        if default_key not in table:
            msg = f"Default species {default_species!r} missing from registry"
            raise ValueError(msg)
        self._table: Mapping[str, T] = table
        self._default = default_key
        self._write_lock = threading.Lock()

    @property
    def default_species(self) -> str:
        return self._default

    def get(self, species: str | None) -> T:
        """Constants for ``species``, or the default species' when unknown."""
        table = self._table
        if species is None:
            return table[self._default]
        return table.get(species_key(species), table[self._default])

    def knows(self, species: str) -> bool:
        return species_key(species) in self._table

    def register(self, species: str, value: T) -> None:
        """Add or replace an entry for ``species``."""
        with self._write_lock:
            table = dict(self._table)
            table[species_key(species)] = value
            self._table = table

    def species(self) -> list[str]:
        return sorted(self._table)


#: Timing constants used by projection and timelines.
REPRO_DEFAULTS: SpeciesRegistry[SpeciesReproDefaults] = SpeciesRegistry(SPECIES_REPRO_DEFAULTS)

#: Validation bounds used by the date validator.
BIOLOGY_RULES: SpeciesRegistry[SpeciesBiologyRules] = SpeciesRegistry(SPECIES_BIOLOGY_DEFAULTS)


def resolve_biology_rules(
    species: str,
    overrides: Mapping[str, SpeciesBiologyOverrides] | None = None,
    registry: SpeciesRegistry[SpeciesBiologyRules] = BIOLOGY_RULES,
) -> SpeciesBiologyRules:
    """Species defaults with a tenant's per-species overrides applied.

    Merge is field-by-field; any field the tenant set wins.
    """
    base = registry.get(species)
    if not overrides:
        return base
    tenant = overrides.get(species_key(species))
    if tenant is None:
        return base
    update = tenant.set_fields()
    if not update:
        return base
    return base.model_copy(update=update)
