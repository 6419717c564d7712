"""Per-species reproduction constants.

Two tables, seeded from breed-club and veterinary-extension guidance:

  - ``SPECIES_REPRO_DEFAULTS``: timing constants that drive projection and
    timeline windows (cycle length, ovulation offset, gestation, placement).
  - ``SPECIES_BIOLOGY_DEFAULTS``: validation bounds for entered plan dates.
    Tenants may override any field per species.

These are the immutable seed values. Runtime lookups go through the
registries in ``engine/registry.py``, which can be extended without a deploy.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

#: Species used when a lookup names an unknown species.
DEFAULT_SPECIES = "DOG"


@dataclass(frozen=True)
class SpeciesReproDefaults:
    """Timing constants for cycle projection and timeline windows."""

    cycle_len_days: int
    ovulation_offset_days: int
    start_buffer_days: int
    gestation_days: int
    # Weeks from birth until weaning is complete.
    offspring_care_duration_weeks: int
    # Must be >= offspring_care_duration_weeks.
    placement_start_weeks_default: int
    placement_extended_weeks: int
    juvenile_first_cycle_min_days: int
    juvenile_first_cycle_likely_days: int
    juvenile_first_cycle_max_days: int
    postpartum_min_days: int
    postpartum_likely_days: int
    postpartum_max_days: int


class SpeciesBiologyRules(BaseModel):
    """Biological bounds used for soft validation warnings."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    gestation_min_days: int
    gestation_typical_days: int
    gestation_max_days: int
    cycle_to_breeding_min_days: int
    cycle_to_breeding_max_days: int
    birth_to_weaning_min_days: int
    birth_to_weaning_typical_days: int
    birth_to_placement_min_days: int
    birth_to_placement_typical_days: int
    birth_to_placement_max_days: int | None = None
    female_min_breeding_age_months: int
    female_max_breeding_age_years: int
    postpartum_recovery_min_days: int
    max_lifetime_litters: int
    min_cycles_between_litters: int


SPECIES_REPRO_DEFAULTS: dict[str, SpeciesReproDefaults] = {
    # Gestation 58-68 days; weaned by 6 weeks; placement at 8 weeks (AKC)
    "DOG": SpeciesReproDefaults(
        cycle_len_days=180,
        ovulation_offset_days=12,
        start_buffer_days=14,
        gestation_days=63,
        offspring_care_duration_weeks=6,
        placement_start_weeks_default=8,
        placement_extended_weeks=4,
        juvenile_first_cycle_min_days=180,
        juvenile_first_cycle_likely_days=270,
        juvenile_first_cycle_max_days=420,
        postpartum_min_days=90,
        postpartum_likely_days=120,
        postpartum_max_days=210,
    ),
    # Weaned by 8 weeks; 12-week placement for socialization (TICA/CFA)
    "CAT": SpeciesReproDefaults(
        cycle_len_days=21,
        ovulation_offset_days=3,
        start_buffer_days=7,
        gestation_days=63,
        offspring_care_duration_weeks=8,
        placement_start_weeks_default=12,
        placement_extended_weeks=4,
        juvenile_first_cycle_min_days=150,
        juvenile_first_cycle_likely_days=210,
        juvenile_first_cycle_max_days=300,
        postpartum_min_days=45,
        postpartum_likely_days=90,
        postpartum_max_days=180,
    ),
    # ~11 month gestation; weaning at 4-6 months (AQHA)
    "HORSE": SpeciesReproDefaults(
        cycle_len_days=21,
        ovulation_offset_days=5,
        start_buffer_days=7,
        gestation_days=340,
        offspring_care_duration_weeks=20,
        placement_start_weeks_default=24,
        placement_extended_weeks=26,
        juvenile_first_cycle_min_days=365,
        juvenile_first_cycle_likely_days=450,
        juvenile_first_cycle_max_days=540,
        postpartum_min_days=30,
        postpartum_likely_days=45,
        postpartum_max_days=120,
    ),
    # Weaning under 70 days causes weaning shock
    "GOAT": SpeciesReproDefaults(
        cycle_len_days=21,
        ovulation_offset_days=2,
        start_buffer_days=7,
        gestation_days=150,
        offspring_care_duration_weeks=9,
        placement_start_weeks_default=10,
        placement_extended_weeks=4,
        juvenile_first_cycle_min_days=150,
        juvenile_first_cycle_likely_days=210,
        juvenile_first_cycle_max_days=300,
        postpartum_min_days=45,
        postpartum_likely_days=90,
        postpartum_max_days=150,
    ),
    # Induced ovulators: "cycle" here models receptivity, not estrus (ARBA)
    "RABBIT": SpeciesReproDefaults(
        cycle_len_days=15,
        ovulation_offset_days=0,
        start_buffer_days=3,
        gestation_days=31,
        offspring_care_duration_weeks=6,
        placement_start_weeks_default=8,
        placement_extended_weeks=2,
        juvenile_first_cycle_min_days=120,
        juvenile_first_cycle_likely_days=150,
        juvenile_first_cycle_max_days=180,
        postpartum_min_days=14,
        postpartum_likely_days=21,
        postpartum_max_days=60,
    ),
    # Seasonal breeders (fall/winter)
    "SHEEP": SpeciesReproDefaults(
        cycle_len_days=17,
        ovulation_offset_days=2,
        start_buffer_days=7,
        gestation_days=147,
        offspring_care_duration_weeks=8,
        placement_start_weeks_default=10,
        placement_extended_weeks=4,
        juvenile_first_cycle_min_days=180,
        juvenile_first_cycle_likely_days=270,
        juvenile_first_cycle_max_days=365,
        postpartum_min_days=45,
        postpartum_likely_days=60,
        postpartum_max_days=120,
    ),
}


SPECIES_BIOLOGY_DEFAULTS: dict[str, SpeciesBiologyRules] = {
    "DOG": SpeciesBiologyRules(
        gestation_min_days=58,
        gestation_typical_days=63,
        gestation_max_days=68,
        cycle_to_breeding_min_days=7,
        cycle_to_breeding_max_days=21,
        birth_to_weaning_min_days=35,
        birth_to_weaning_typical_days=42,
        birth_to_placement_min_days=56,  # state-law minimum in most places
        birth_to_placement_typical_days=56,
        female_min_breeding_age_months=18,
        female_max_breeding_age_years=8,
        postpartum_recovery_min_days=180,  # skip at least one heat
        max_lifetime_litters=6,
        min_cycles_between_litters=1,
    ),
    "CAT": SpeciesBiologyRules(
        gestation_min_days=58,
        gestation_typical_days=63,
        gestation_max_days=70,
        cycle_to_breeding_min_days=2,
        cycle_to_breeding_max_days=7,
        birth_to_weaning_min_days=42,
        birth_to_weaning_typical_days=56,
        birth_to_placement_min_days=56,
        birth_to_placement_typical_days=84,
        female_min_breeding_age_months=12,
        female_max_breeding_age_years=8,
        postpartum_recovery_min_days=60,
        max_lifetime_litters=5,
        min_cycles_between_litters=1,
    ),
    "HORSE": SpeciesBiologyRules(
        gestation_min_days=320,
        gestation_typical_days=340,
        gestation_max_days=370,
        cycle_to_breeding_min_days=3,
        cycle_to_breeding_max_days=7,
        birth_to_weaning_min_days=112,
        birth_to_weaning_typical_days=140,
        birth_to_placement_min_days=140,
        birth_to_placement_typical_days=168,
        female_min_breeding_age_months=36,
        female_max_breeding_age_years=20,
        postpartum_recovery_min_days=30,  # foal heat ~9 days, often skipped
        max_lifetime_litters=15,
        min_cycles_between_litters=0,
    ),
    "GOAT": SpeciesBiologyRules(
        gestation_min_days=145,
        gestation_typical_days=150,
        gestation_max_days=157,
        cycle_to_breeding_min_days=1,
        cycle_to_breeding_max_days=3,
        birth_to_weaning_min_days=56,
        birth_to_weaning_typical_days=63,
        birth_to_placement_min_days=63,
        birth_to_placement_typical_days=70,
        female_min_breeding_age_months=8,
        female_max_breeding_age_years=10,
        postpartum_recovery_min_days=60,
        max_lifetime_litters=8,
        min_cycles_between_litters=0,
    ),
    "RABBIT": SpeciesBiologyRules(
        gestation_min_days=28,
        gestation_typical_days=31,
        gestation_max_days=35,
        cycle_to_breeding_min_days=0,
        cycle_to_breeding_max_days=1,
        birth_to_weaning_min_days=28,
        birth_to_weaning_typical_days=42,
        birth_to_placement_min_days=42,
        birth_to_placement_typical_days=56,
        # Kits must be separated before 10 weeks or they fight
        birth_to_placement_max_days=70,
        female_min_breeding_age_months=6,
        female_max_breeding_age_years=4,
        postpartum_recovery_min_days=21,
        max_lifetime_litters=6,
        min_cycles_between_litters=0,
    ),
    "SHEEP": SpeciesBiologyRules(
        gestation_min_days=142,
        gestation_typical_days=147,
        gestation_max_days=155,
        cycle_to_breeding_min_days=1,
        cycle_to_breeding_max_days=3,
        birth_to_weaning_min_days=56,
        birth_to_weaning_typical_days=56,
        birth_to_placement_min_days=56,
        birth_to_placement_typical_days=70,
        female_min_breeding_age_months=12,
        female_max_breeding_age_years=10,
        postpartum_recovery_min_days=60,
        max_lifetime_litters=8,
        min_cycles_between_litters=0,
    ),
}
