"""
Breeding-plan date validation.

Pure and stateless: ``validate_breeding_dates(dates, ctx)`` reads only its
arguments and the species registry, so repeated calls with the same inputs
return equal results.

Rule families, each behind its own config toggle:

  - Sequence (hard errors): milestones must not go backwards in time, and
    optionally each entered milestone needs its immediate predecessor.
  - Future policy: actuals after ``today`` are errors, or info warnings when
    the tenant allows future actuals.
  - Biology (soft warnings): species bounds merged with tenant overrides.
  - Business (soft warnings): plan span, cycle-start range, skipped
    milestones, deposits without a breeding.

A malformed date is an INVALID_DATE_FORMAT error and that milestone is
treated as not entered for every other rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from repro_planner.dates import days_between, months_between, parse_iso_date
from repro_planner.engine.registry import BIOLOGY_RULES, SpeciesRegistry, resolve_biology_rules
from repro_planner.validation.codes import (
    MILESTONE_SEQUENCE,
    ErrorCode,
    Milestone,
    Severity,
    WarningCode,
)
from repro_planner.validation.models import (
    PlanActualDates,
    RawDate,
    ValidationContext,
    ValidationError,
    ValidationResult,
    ValidationWarning,
    WarningDetails,
)

if TYPE_CHECKING:
    from datetime import date

    from repro_planner.reference.species import SpeciesBiologyRules

Populated = dict[Milestone, "date"]


# ============================================================================
# Helpers
# ============================================================================


def _fmt(d: date) -> str:
    return f"{d:%b} {d.day}, {d.year}"


def _weeks(days: int) -> int:
    return round(days / 7)


@dataclass(frozen=True)
class _Rules:
    """Effective species rules plus what they were merged from."""

    effective: SpeciesBiologyRules
    defaults: SpeciesBiologyRules
    tenant: dict[str, int]

    def details(self, rule: str, expected: str, actual: str) -> WarningDetails:
        return WarningDetails(
            expected=expected,
            actual=actual,
            species_default=getattr(self.defaults, rule),
            tenant_override=self.tenant.get(rule),
        )


def _resolve_rules(ctx: ValidationContext, registry: SpeciesRegistry[SpeciesBiologyRules]) -> _Rules:
    overrides = ctx.config.species_overrides
    tenant = overrides.get(ctx.species.strip().upper())
    return _Rules(
        effective=resolve_biology_rules(ctx.species, overrides, registry=registry),
        defaults=registry.get(ctx.species),
        tenant=tenant.set_fields() if tenant is not None else {},
    )


class _Collector:
    """Accumulates issues for one validation run."""

    def __init__(self, ctx: ValidationContext) -> None:
        self.ctx = ctx
        self.errors: list[ValidationError] = []
        self.warnings: list[ValidationWarning] = []

    def error(
        self,
        code: ErrorCode,
        field: Milestone,
        message: str,
        expected: str | None = None,
        actual: str | None = None,
    ) -> None:
        self.errors.append(
            ValidationError(field=field.value, code=code, message=message, expected=expected, actual=actual)
        )

    def warn(
        self,
        code: WarningCode,
        field: Milestone,
        message: str,
        severity: Severity,
        details: WarningDetails,
    ) -> None:
        self.warnings.append(
            ValidationWarning(
                field=field.value,
                code=code,
                message=message,
                severity=severity,
                can_override=code not in self.ctx.config.non_overridable_warnings,
                details=details,
            )
        )

    def result(self) -> ValidationResult:
        return ValidationResult(errors=self.errors, warnings=self.warnings)


# ============================================================================
# Parsing
# ============================================================================


def _parse_dates(dates: PlanActualDates, out: _Collector) -> Populated:
    populated: Populated = {}
    for milestone in MILESTONE_SEQUENCE:
        raw: RawDate = dates.get(milestone)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            continue
        parsed = parse_iso_date(raw)
        if parsed is None:
            out.error(
                ErrorCode.INVALID_DATE_FORMAT,
                milestone,
                f"{milestone.label} is not a valid date: {raw!r}",
                expected="YYYY-MM-DD",
                actual=str(raw),
            )
            continue
        populated[milestone] = parsed
    return populated


# ============================================================================
# Sequence + future policy (hard)
# ============================================================================


def _check_sequence(populated: Populated, out: _Collector) -> None:
    config = out.ctx.config
    if not config.enable_sequence_validation or not config.sequence_rules.enforce_sequence_order:
        return

    latest: tuple[Milestone, date] | None = None
    for milestone in MILESTONE_SEQUENCE:
        current = populated.get(milestone)
        if current is None:
            continue
        if latest is not None and current < latest[1]:
            prior, prior_date = latest
            out.error(
                ErrorCode.SEQUENCE_VIOLATION,
                milestone,
                f"{milestone.label} ({_fmt(current)}) cannot be before {prior.label} ({_fmt(prior_date)})",
                expected=f"On or after {prior_date.isoformat()}",
                actual=current.isoformat(),
            )
            continue
        latest = (milestone, current)


def _check_prior_milestones(populated: Populated, out: _Collector) -> None:
    config = out.ctx.config
    if not config.enable_sequence_validation or not config.sequence_rules.require_prior_milestone:
        return

    for prior, milestone in zip(MILESTONE_SEQUENCE, MILESTONE_SEQUENCE[1:], strict=False):
        if milestone in populated and prior not in populated:
            out.error(
                ErrorCode.MISSING_REQUIRED_PRIOR,
                milestone,
                f"Cannot enter {milestone.label} without {prior.label}",
                expected=f"{prior.label} date required first",
            )


def _check_future(populated: Populated, out: _Collector) -> None:
    config = out.ctx.config
    if not config.enable_sequence_validation:
        return

    today = out.ctx.today
    for milestone, value in populated.items():
        if value <= today:
            continue
        if not config.sequence_rules.allow_future_actuals:
            out.error(
                ErrorCode.DATE_IN_FUTURE,
                milestone,
                f"{milestone.label} ({_fmt(value)}) is in the future. Actual dates must be on or before today",
                expected=f"On or before {today.isoformat()}",
                actual=value.isoformat(),
            )
        else:
            out.warn(
                WarningCode.ACTUAL_IN_FUTURE,
                milestone,
                f"{milestone.label} is in the future. Did you mean to enter an expected date?",
                Severity.INFO,
                WarningDetails(expected=f"On or before {today.isoformat()}", actual=value.isoformat()),
            )


# ============================================================================
# Biology (soft)
# ============================================================================


def _check_gestation(populated: Populated, rules: _Rules, out: _Collector) -> None:
    breeding = populated.get(Milestone.BREEDING)
    birth = populated.get(Milestone.BIRTH)
    if breeding is None or birth is None:
        return

    r = rules.effective
    days = days_between(breeding, birth)
    expected = f"{r.gestation_min_days}-{r.gestation_max_days} days"
    if days < r.gestation_min_days:
        out.warn(
            WarningCode.GESTATION_TOO_SHORT,
            Milestone.BIRTH,
            f"Gestation of {days} days is shorter than the minimum of {r.gestation_min_days} days for this species",
            Severity.SERIOUS,
            rules.details("gestation_min_days", expected, f"{days} days"),
        )
    elif days > r.gestation_max_days:
        out.warn(
            WarningCode.GESTATION_TOO_LONG,
            Milestone.BIRTH,
            f"Gestation of {days} days exceeds the maximum of {r.gestation_max_days} days for this species",
            Severity.SERIOUS,
            rules.details("gestation_max_days", expected, f"{days} days"),
        )


def _check_breeding_timing(populated: Populated, rules: _Rules, out: _Collector) -> None:
    cycle_start = populated.get(Milestone.CYCLE_START)
    breeding = populated.get(Milestone.BREEDING)
    if cycle_start is None or breeding is None:
        return

    r = rules.effective
    days = days_between(cycle_start, breeding)
    expected = f"{r.cycle_to_breeding_min_days}-{r.cycle_to_breeding_max_days} days"
    actual = f"{days} days from cycle start"
    if days < r.cycle_to_breeding_min_days:
        out.warn(
            WarningCode.BREEDING_TOO_EARLY,
            Milestone.BREEDING,
            f"Breeding at {days} days from cycle start is earlier than the typical minimum "
            f"of {r.cycle_to_breeding_min_days} days",
            Severity.CAUTION,
            rules.details("cycle_to_breeding_min_days", expected, actual),
        )
    elif days > r.cycle_to_breeding_max_days:
        out.warn(
            WarningCode.BREEDING_TOO_LATE,
            Milestone.BREEDING,
            f"Breeding at {days} days from cycle start is later than the typical maximum "
            f"of {r.cycle_to_breeding_max_days} days",
            Severity.CAUTION,
            rules.details("cycle_to_breeding_max_days", expected, actual),
        )


def _check_weaning(populated: Populated, rules: _Rules, out: _Collector) -> None:
    birth = populated.get(Milestone.BIRTH)
    weaning = populated.get(Milestone.WEANING)
    if birth is None or weaning is None:
        return

    minimum = rules.effective.birth_to_weaning_min_days
    days = days_between(birth, weaning)
    if days < minimum:
        out.warn(
            WarningCode.WEANING_TOO_EARLY,
            Milestone.WEANING,
            f"Weaning at {days} days ({_weeks(days)} weeks) is earlier than the recommended minimum "
            f"of {minimum} days ({_weeks(minimum)} weeks)",
            Severity.SERIOUS,
            rules.details(
                "birth_to_weaning_min_days",
                f"Minimum {minimum} days ({_weeks(minimum)} weeks)",
                f"{days} days ({_weeks(days)} weeks)",
            ),
        )


def _check_placement(populated: Populated, rules: _Rules, out: _Collector) -> None:
    birth = populated.get(Milestone.BIRTH)
    placement = populated.get(Milestone.PLACEMENT_START)
    if birth is None or placement is None:
        return

    r = rules.effective
    days = days_between(birth, placement)
    actual = f"{days} days ({_weeks(days)} weeks)"
    if days < r.birth_to_placement_min_days:
        minimum = r.birth_to_placement_min_days
        out.warn(
            WarningCode.PLACEMENT_TOO_EARLY,
            Milestone.PLACEMENT_START,
            f"Placement at {actual} is earlier than the minimum of {minimum} days ({_weeks(minimum)} weeks)",
            Severity.SERIOUS,
            rules.details(
                "birth_to_placement_min_days", f"Minimum {minimum} days ({_weeks(minimum)} weeks)", actual
            ),
        )
    elif r.birth_to_placement_max_days is not None and days > r.birth_to_placement_max_days:
        maximum = r.birth_to_placement_max_days
        out.warn(
            WarningCode.PLACEMENT_TOO_LATE,
            Milestone.PLACEMENT_START,
            f"Placement at {actual} exceeds the maximum of {maximum} days ({_weeks(maximum)} weeks)",
            Severity.SERIOUS,
            rules.details(
                "birth_to_placement_max_days", f"Maximum {maximum} days ({_weeks(maximum)} weeks)", actual
            ),
        )


def _check_female_age(populated: Populated, rules: _Rules, out: _Collector) -> None:
    dob = out.ctx.female_dob
    bred_on = populated.get(Milestone.BREEDING) or populated.get(Milestone.CYCLE_START)
    if dob is None or bred_on is None:
        return

    r = rules.effective
    age_months = months_between(dob, bred_on)
    age_years = age_months / 12
    if age_months < r.female_min_breeding_age_months:
        out.warn(
            WarningCode.FEMALE_TOO_YOUNG,
            Milestone.BREEDING,
            f"Female is {age_months} months old at breeding. "
            f"Minimum recommended age is {r.female_min_breeding_age_months} months",
            Severity.SERIOUS,
            rules.details(
                "female_min_breeding_age_months",
                f"Minimum {r.female_min_breeding_age_months} months",
                f"{age_months} months",
            ),
        )
    elif age_years > r.female_max_breeding_age_years:
        out.warn(
            WarningCode.FEMALE_TOO_OLD,
            Milestone.BREEDING,
            f"Female is {age_years:.1f} years old at breeding. "
            f"Consider retirement after {r.female_max_breeding_age_years} years",
            Severity.CAUTION,
            rules.details(
                "female_max_breeding_age_years",
                f"Retirement recommended after {r.female_max_breeding_age_years} years",
                f"{age_years:.1f} years",
            ),
        )


def _check_postpartum(populated: Populated, rules: _Rules, out: _Collector) -> None:
    last_birth = out.ctx.female_last_birth_date
    if last_birth is None:
        return
    field = Milestone.CYCLE_START
    resumed = populated.get(field)
    if resumed is None:
        field = Milestone.BREEDING
        resumed = populated.get(field)
    if resumed is None:
        return

    minimum = rules.effective.postpartum_recovery_min_days
    days = days_between(last_birth, resumed)
    if days < minimum:
        out.warn(
            WarningCode.POSTPARTUM_TOO_SOON,
            field,
            f"{field.label} is {days} days after the previous birth. "
            f"Minimum recovery period is {minimum} days",
            Severity.SERIOUS,
            rules.details(
                "postpartum_recovery_min_days",
                f"Minimum {minimum} days recovery",
                f"{days} days since last birth",
            ),
        )


def _check_litter_count(rules: _Rules, out: _Collector) -> None:
    count = out.ctx.female_litter_count
    if count is None:
        return

    maximum = rules.effective.max_lifetime_litters
    if count >= maximum:
        out.warn(
            WarningCode.EXCEEDS_LITTER_LIMIT,
            Milestone.CYCLE_START,
            f"Female has had {count} litters. Recommended maximum is {maximum}",
            Severity.SERIOUS,
            rules.details("max_lifetime_litters", f"Maximum {maximum} litters", f"{count} litters"),
        )


# ============================================================================
# Business (soft)
# ============================================================================


def _check_plan_duration(populated: Populated, out: _Collector) -> None:
    if len(populated) < 2:
        return
    ordered = [m for m in MILESTONE_SEQUENCE if m in populated]
    first, last = ordered[0], ordered[-1]
    maximum = out.ctx.config.business_rules.max_plan_duration_months
    months = months_between(populated[first], populated[last])
    if months > maximum:
        out.warn(
            WarningCode.PLAN_TOO_LONG,
            last,
            f"Plan spans {months} months from {first.label} to {last.label}, "
            f"beyond the typical maximum of {maximum} months",
            Severity.INFO,
            WarningDetails(expected=f"Maximum {maximum} months", actual=f"{months} months"),
        )


def _check_cycle_start_range(populated: Populated, out: _Collector) -> None:
    cycle_start = populated.get(Milestone.CYCLE_START)
    if cycle_start is None:
        return

    business = out.ctx.config.business_rules
    months = months_between(out.ctx.today, cycle_start)
    if months > business.max_future_cycle_start_months:
        out.warn(
            WarningCode.CYCLE_TOO_FAR_FUTURE,
            Milestone.CYCLE_START,
            f"Cycle start is {months} months in the future. Are you sure?",
            Severity.INFO,
            WarningDetails(
                expected=f"Within {business.max_future_cycle_start_months} months",
                actual=f"{months} months ahead",
            ),
        )
    elif months < -business.max_past_cycle_start_months:
        out.warn(
            WarningCode.CYCLE_TOO_FAR_PAST,
            Milestone.CYCLE_START,
            f"Cycle start is {abs(months)} months in the past. Are you sure?",
            Severity.INFO,
            WarningDetails(
                expected=f"Within {business.max_past_cycle_start_months} months",
                actual=f"{abs(months)} months ago",
            ),
        )


def _check_intermediate_milestones(populated: Populated, out: _Collector) -> None:
    if not out.ctx.config.business_rules.warn_on_missing_intermediate_actuals:
        return
    positions = [i for i, m in enumerate(MILESTONE_SEQUENCE) if m in populated]
    if len(positions) < 2:
        return

    first, last = MILESTONE_SEQUENCE[positions[0]], MILESTONE_SEQUENCE[positions[-1]]
    for milestone in MILESTONE_SEQUENCE[positions[0] + 1 : positions[-1]]:
        if milestone in populated:
            continue
        out.warn(
            WarningCode.MISSING_INTERMEDIATE_ACTUAL,
            milestone,
            f"{milestone.label} is missing between {first.label} and {last.label}",
            Severity.INFO,
            WarningDetails(expected=f"{milestone.label} date", actual="not entered"),
        )


def _check_deposits(populated: Populated, out: _Collector) -> None:
    if not out.ctx.config.business_rules.require_breeding_before_deposits:
        return
    if out.ctx.has_deposits and Milestone.BREEDING not in populated:
        out.warn(
            WarningCode.DEPOSITS_WITHOUT_BREEDING,
            Milestone.BREEDING,
            "Deposits have been recorded but no breeding date has been entered",
            Severity.CAUTION,
            WarningDetails(expected="Breeding date before taking deposits", actual="not entered"),
        )


# ============================================================================
# Entry points
# ============================================================================


def validate_breeding_dates(
    dates: PlanActualDates,
    ctx: ValidationContext,
    registry: SpeciesRegistry[SpeciesBiologyRules] = BIOLOGY_RULES,
) -> ValidationResult:
    """Validate every milestone date of a breeding plan.

    Args:
        dates: Raw actual dates from the plan.
        ctx: Species, tenant config, female history and the caller's today.
        registry: Species biology defaults.

    Returns:
        ValidationResult; ``valid`` is False exactly when errors exist.
    """
    out = _Collector(ctx)
    populated = _parse_dates(dates, out)

    _check_sequence(populated, out)
    _check_prior_milestones(populated, out)
    _check_future(populated, out)

    if ctx.config.enable_biology_warnings:
        rules = _resolve_rules(ctx, registry)
        _check_gestation(populated, rules, out)
        _check_breeding_timing(populated, rules, out)
        _check_weaning(populated, rules, out)
        _check_placement(populated, rules, out)
        _check_female_age(populated, rules, out)
        _check_postpartum(populated, rules, out)
        _check_litter_count(rules, out)

    if ctx.config.enable_business_warnings:
        _check_plan_duration(populated, out)
        _check_cycle_start_range(populated, out)
        _check_intermediate_milestones(populated, out)
        _check_deposits(populated, out)

    return out.result()


def validate_single_date(
    field: Milestone | str,
    value: RawDate,
    dates: PlanActualDates,
    ctx: ValidationContext,
    registry: SpeciesRegistry[SpeciesBiologyRules] = BIOLOGY_RULES,
) -> ValidationResult:
    """Validate one field as if ``value`` were entered, for inline feedback.

    The whole plan is validated with the new value; only issues on ``field``
    are returned.

    Raises:
        ValueError: ``field`` is not a milestone name.
    """
    milestone = Milestone(field)
    result = validate_breeding_dates(dates.with_value(milestone, value), ctx, registry=registry)
    return ValidationResult(
        errors=[e for e in result.errors if e.field == milestone.value],
        warnings=[w for w in result.warnings if w.field == milestone.value],
    )
