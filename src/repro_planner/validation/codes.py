"""Closed vocabularies for plan-date validation."""

from __future__ import annotations

from enum import StrEnum
from typing import assert_never


class Milestone(StrEnum):
    """Plan milestones in their fixed chronological order."""

    CYCLE_START = "cycleStart"
    HORMONE_TESTING = "hormoneTesting"
    BREEDING = "breeding"
    BIRTH = "birth"
    WEANING = "weaning"
    PLACEMENT_START = "placementStart"
    PLACEMENT_COMPLETED = "placementCompleted"
    PLAN_COMPLETED = "planCompleted"

    @property
    def label(self) -> str:
        return MILESTONE_LABELS[self]


MILESTONE_SEQUENCE: tuple[Milestone, ...] = tuple(Milestone)

MILESTONE_LABELS: dict[Milestone, str] = {
    Milestone.CYCLE_START: "Cycle Start",
    Milestone.HORMONE_TESTING: "Hormone Testing",
    Milestone.BREEDING: "Breeding",
    Milestone.BIRTH: "Birth",
    Milestone.WEANING: "Weaning",
    Milestone.PLACEMENT_START: "Placement Start",
    Milestone.PLACEMENT_COMPLETED: "Placement Completed",
    Milestone.PLAN_COMPLETED: "Plan Completed",
}


class Severity(StrEnum):
    INFO = "info"
    CAUTION = "caution"
    SERIOUS = "serious"


class ErrorCode(StrEnum):
    """Hard errors: the plan cannot be saved."""

    SEQUENCE_VIOLATION = "SEQUENCE_VIOLATION"
    MISSING_REQUIRED_PRIOR = "MISSING_REQUIRED_PRIOR"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    DATE_IN_FUTURE = "DATE_IN_FUTURE"


class WarningCode(StrEnum):
    """Soft warnings: the user may proceed after acknowledging."""

    GESTATION_TOO_SHORT = "GESTATION_TOO_SHORT"
    GESTATION_TOO_LONG = "GESTATION_TOO_LONG"
    BREEDING_TOO_EARLY = "BREEDING_TOO_EARLY"
    BREEDING_TOO_LATE = "BREEDING_TOO_LATE"
    WEANING_TOO_EARLY = "WEANING_TOO_EARLY"
    PLACEMENT_TOO_EARLY = "PLACEMENT_TOO_EARLY"
    PLACEMENT_TOO_LATE = "PLACEMENT_TOO_LATE"
    FEMALE_TOO_YOUNG = "FEMALE_TOO_YOUNG"
    FEMALE_TOO_OLD = "FEMALE_TOO_OLD"
    POSTPARTUM_TOO_SOON = "POSTPARTUM_TOO_SOON"
    EXCEEDS_LITTER_LIMIT = "EXCEEDS_LITTER_LIMIT"
    PLAN_TOO_LONG = "PLAN_TOO_LONG"
    CYCLE_TOO_FAR_FUTURE = "CYCLE_TOO_FAR_FUTURE"
    CYCLE_TOO_FAR_PAST = "CYCLE_TOO_FAR_PAST"
    MISSING_INTERMEDIATE_ACTUAL = "MISSING_INTERMEDIATE_ACTUAL"
    DEPOSITS_WITHOUT_BREEDING = "DEPOSITS_WITHOUT_BREEDING"
    ACTUAL_IN_FUTURE = "ACTUAL_IN_FUTURE"


class IssueCategory(StrEnum):
    SEQUENCE = "sequence"
    FORMAT = "format"
    FUTURE = "future"
    BIOLOGY = "biology"
    BUSINESS = "business"


def describe_issue_code(code: ErrorCode | WarningCode) -> IssueCategory:
    """Rule family a code belongs to.

    A new code fails type checking here until it is assigned a category.
    """
    match code:
        case ErrorCode.SEQUENCE_VIOLATION | ErrorCode.MISSING_REQUIRED_PRIOR:
            return IssueCategory.SEQUENCE
        case ErrorCode.INVALID_DATE_FORMAT:
            return IssueCategory.FORMAT
        case ErrorCode.DATE_IN_FUTURE | WarningCode.ACTUAL_IN_FUTURE:
            return IssueCategory.FUTURE
        case (
            WarningCode.GESTATION_TOO_SHORT
            | WarningCode.GESTATION_TOO_LONG
            | WarningCode.BREEDING_TOO_EARLY
            | WarningCode.BREEDING_TOO_LATE
            | WarningCode.WEANING_TOO_EARLY
            | WarningCode.PLACEMENT_TOO_EARLY
            | WarningCode.PLACEMENT_TOO_LATE
            | WarningCode.FEMALE_TOO_YOUNG
            | WarningCode.FEMALE_TOO_OLD
            | WarningCode.POSTPARTUM_TOO_SOON
            | WarningCode.EXCEEDS_LITTER_LIMIT
        ):
            return IssueCategory.BIOLOGY
        case (
            WarningCode.PLAN_TOO_LONG
            | WarningCode.CYCLE_TOO_FAR_FUTURE
            | WarningCode.CYCLE_TOO_FAR_PAST
            | WarningCode.MISSING_INTERMEDIATE_ACTUAL
            | WarningCode.DEPOSITS_WITHOUT_BREEDING
        ):
            return IssueCategory.BUSINESS
        case _:
            assert_never(code)
