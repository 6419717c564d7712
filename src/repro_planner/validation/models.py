"""
Pydantic models for plan-date validation.

Field names are snake_case in Python and camelCase on the wire, matching the
tenant settings store and the override log JSON.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from repro_planner.validation.codes import ErrorCode, Milestone, Severity, WarningCode

RawDate = date | str | None


class CamelModel(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Tenant configuration
# =============================================================================


class SequenceValidationRules(CamelModel):
    """Hard blocks for impossible date orders."""

    enforce_sequence_order: bool = True
    # Entering an actual requires the immediately prior milestone's actual
    require_prior_milestone: bool = False
    # False: actuals after today are errors; True: info warnings
    allow_future_actuals: bool = False


class BusinessValidationRules(CamelModel):
    """Operational heuristics, all soft."""

    max_plan_duration_months: int = 24
    max_future_cycle_start_months: int = 18
    max_past_cycle_start_months: int = 24
    require_breeding_before_deposits: bool = False
    warn_on_missing_intermediate_actuals: bool = True


class SpeciesBiologyOverrides(CamelModel):
    """Tenant's partial override of one species' biology rules."""

    gestation_min_days: int | None = None
    gestation_typical_days: int | None = None
    gestation_max_days: int | None = None
    cycle_to_breeding_min_days: int | None = None
    cycle_to_breeding_max_days: int | None = None
    birth_to_weaning_min_days: int | None = None
    birth_to_weaning_typical_days: int | None = None
    birth_to_placement_min_days: int | None = None
    birth_to_placement_typical_days: int | None = None
    birth_to_placement_max_days: int | None = None
    female_min_breeding_age_months: int | None = None
    female_max_breeding_age_years: int | None = None
    postpartum_recovery_min_days: int | None = None
    max_lifetime_litters: int | None = None
    min_cycles_between_litters: int | None = None

    def set_fields(self) -> dict[str, int]:
        """Only the fields the tenant actually set, keyed by Python name."""
        return self.model_dump(exclude_none=True)


class DateValidationConfig(CamelModel):
    """Full tenant validation configuration.

    Loaded once per tenant. Frozen: an update builds a new config
    (``model_copy(update=...)``).
    """

    enable_sequence_validation: bool = True
    enable_biology_warnings: bool = True
    enable_business_warnings: bool = True
    sequence_rules: SequenceValidationRules = Field(default_factory=SequenceValidationRules)
    business_rules: BusinessValidationRules = Field(default_factory=BusinessValidationRules)
    species_overrides: dict[str, SpeciesBiologyOverrides] = Field(default_factory=dict)
    # Warnings with these codes are emitted with can_override=False
    non_overridable_warnings: list[WarningCode] = Field(default_factory=list)

    @field_validator("species_overrides")
    @classmethod
    def _upper_species_keys(
        cls, value: dict[str, SpeciesBiologyOverrides]
    ) -> dict[str, SpeciesBiologyOverrides]:
        return {k.strip().upper(): v for k, v in value.items()}


# =============================================================================
# Validation inputs
# =============================================================================


class PlanActualDates(CamelModel):
    """Raw actual dates of one breeding plan, as entered.

    Values stay raw (string or date) so that malformed entries can be
    reported as INVALID_DATE_FORMAT rather than rejected on construction.
    """

    cycle_start_actual: RawDate = None
    hormone_testing_actual: RawDate = None
    breeding_actual: RawDate = None
    birth_actual: RawDate = None
    weaning_actual: RawDate = None
    placement_start_actual: RawDate = None
    placement_completed_actual: RawDate = None
    plan_completed_actual: RawDate = None

    def get(self, milestone: Milestone) -> RawDate:
        value: RawDate = getattr(self, PLAN_FIELD_NAMES[milestone])
        return value

    def with_value(self, milestone: Milestone, value: RawDate) -> PlanActualDates:
        return self.model_copy(update={PLAN_FIELD_NAMES[milestone]: value})


PLAN_FIELD_NAMES: dict[Milestone, str] = {
    Milestone.CYCLE_START: "cycle_start_actual",
    Milestone.HORMONE_TESTING: "hormone_testing_actual",
    Milestone.BREEDING: "breeding_actual",
    Milestone.BIRTH: "birth_actual",
    Milestone.WEANING: "weaning_actual",
    Milestone.PLACEMENT_START: "placement_start_actual",
    Milestone.PLACEMENT_COMPLETED: "placement_completed_actual",
    Milestone.PLAN_COMPLETED: "plan_completed_actual",
}


class ValidationContext(CamelModel):
    """Everything besides the dates themselves that the rules need."""

    species: str
    today: date = Field(..., description="Reference date supplied by the caller")
    config: DateValidationConfig = Field(default_factory=DateValidationConfig)
    female_dob: date | None = None
    female_litter_count: int | None = None
    female_last_birth_date: date | None = None
    # Deposit existence is owned by the caller's finance records
    has_deposits: bool = False


# =============================================================================
# Validation outputs
# =============================================================================


class WarningDetails(CamelModel):
    """Enough context to rebuild the audit message without re-validating."""

    expected: str | None = None
    actual: str | None = None
    species_default: float | None = None
    tenant_override: float | None = None


class ValidationError(CamelModel):
    """Hard error: blocks the save."""

    field: str
    code: ErrorCode
    message: str
    expected: str | None = None
    actual: str | None = None


class ValidationWarning(CamelModel):
    """Soft warning: advisory, may be overridden."""

    field: str
    code: WarningCode
    message: str
    severity: Severity
    can_override: bool = True
    details: WarningDetails = Field(default_factory=WarningDetails)


class ValidationResult(CamelModel):
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def valid(self) -> bool:
        return not self.errors


# =============================================================================
# Audit
# =============================================================================


class WarningOverride(CamelModel):
    """A user's acknowledgement that a plan was saved despite a warning."""

    warning_code: WarningCode
    field: str
    acknowledged_at: datetime
    acknowledged_by: str
    message: str
    value_entered: str
