"""Plan-date validation: hard sequence errors and overridable soft warnings.

Usage:
    from repro_planner.validation import (
        PlanActualDates, ValidationContext, merge_validation_config, validate_breeding_dates,
    )

    ctx = ValidationContext(species="DOG", today=date.today(), config=merge_validation_config(raw))
    result = validate_breeding_dates(PlanActualDates(breeding_actual="2024-01-10"), ctx)
"""

from repro_planner.validation.codes import (
    MILESTONE_SEQUENCE,
    ErrorCode,
    IssueCategory,
    Milestone,
    Severity,
    WarningCode,
    describe_issue_code,
)
from repro_planner.validation.defaults import (
    DEFAULT_BUSINESS_RULES,
    DEFAULT_SEQUENCE_RULES,
    DEFAULT_VALIDATION_CONFIG,
    merge_validation_config,
)
from repro_planner.validation.models import (
    BusinessValidationRules,
    DateValidationConfig,
    PlanActualDates,
    SequenceValidationRules,
    SpeciesBiologyOverrides,
    ValidationContext,
    ValidationError,
    ValidationResult,
    ValidationWarning,
    WarningDetails,
    WarningOverride,
)
from repro_planner.validation.validate import validate_breeding_dates, validate_single_date

__all__ = [
    "DEFAULT_BUSINESS_RULES",
    "DEFAULT_SEQUENCE_RULES",
    "DEFAULT_VALIDATION_CONFIG",
    "MILESTONE_SEQUENCE",
    "BusinessValidationRules",
    "DateValidationConfig",
    "ErrorCode",
    "IssueCategory",
    "Milestone",
    "PlanActualDates",
    "SequenceValidationRules",
    "Severity",
    "SpeciesBiologyOverrides",
    "ValidationContext",
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "WarningCode",
    "WarningDetails",
    "WarningOverride",
    "describe_issue_code",
    "merge_validation_config",
    "validate_breeding_dates",
    "validate_single_date",
]
