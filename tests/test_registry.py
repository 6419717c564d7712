"""Tests for the species registries."""

from __future__ import annotations

from dataclasses import replace

import pytest

from repro_planner.engine.registry import (
    BIOLOGY_RULES,
    REPRO_DEFAULTS,
    SpeciesRegistry,
    resolve_biology_rules,
)
from repro_planner.reference import SPECIES_REPRO_DEFAULTS
from repro_planner.validation.models import SpeciesBiologyOverrides


class TestSpeciesRegistry:
    """Lookup, fallback and runtime registration."""

    def test_known_species(self) -> None:
        assert REPRO_DEFAULTS.get("CAT").cycle_len_days == 21

    def test_lookup_is_case_insensitive(self) -> None:
        assert REPRO_DEFAULTS.get(" cat ") == REPRO_DEFAULTS.get("CAT")

    def test_unknown_species_falls_back_to_dog(self) -> None:
        assert REPRO_DEFAULTS.get("ALPACA") == REPRO_DEFAULTS.get("DOG")
        assert REPRO_DEFAULTS.get(None) == REPRO_DEFAULTS.get("DOG")

    def test_seeded_species(self) -> None:
        assert REPRO_DEFAULTS.species() == ["CAT", "DOG", "GOAT", "HORSE", "RABBIT", "SHEEP"]
        assert BIOLOGY_RULES.knows("horse")

    def test_register_adds_species(self) -> None:
        registry = SpeciesRegistry(SPECIES_REPRO_DEFAULTS)
        alpaca = replace(SPECIES_REPRO_DEFAULTS["GOAT"], cycle_len_days=14, gestation_days=345)

        registry.register("alpaca", alpaca)

        assert registry.knows("ALPACA")
        assert registry.get("ALPACA").gestation_days == 345
        # Module-level registry is untouched
        assert not REPRO_DEFAULTS.knows("ALPACA")

    def test_missing_default_rejected(self) -> None:
        with pytest.raises(ValueError, match="Default species"):
            SpeciesRegistry({"CAT": SPECIES_REPRO_DEFAULTS["CAT"]}, default_species="DOG")


class TestResolveBiologyRules:
    """Tenant overrides merged onto species defaults."""

    def test_no_overrides(self) -> None:
        assert resolve_biology_rules("DOG") == BIOLOGY_RULES.get("DOG")

    def test_override_wins_field_by_field(self) -> None:
        overrides = {"DOG": SpeciesBiologyOverrides(gestation_min_days=55)}
        rules = resolve_biology_rules("dog", overrides)
        assert rules.gestation_min_days == 55
        assert rules.gestation_max_days == BIOLOGY_RULES.get("DOG").gestation_max_days

    def test_other_species_override_ignored(self) -> None:
        overrides = {"CAT": SpeciesBiologyOverrides(gestation_min_days=40)}
        assert resolve_biology_rules("DOG", overrides) == BIOLOGY_RULES.get("DOG")
