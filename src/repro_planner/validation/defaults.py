"""Default validation configuration and the tenant merge."""

from __future__ import annotations

from typing import Any

from repro_planner.validation.models import (
    BusinessValidationRules,
    DateValidationConfig,
    SequenceValidationRules,
)

DEFAULT_SEQUENCE_RULES = SequenceValidationRules()
DEFAULT_BUSINESS_RULES = BusinessValidationRules()

#: Used for new tenants and whenever tenant config is absent or unreachable.
DEFAULT_VALIDATION_CONFIG = DateValidationConfig(
    sequence_rules=DEFAULT_SEQUENCE_RULES,
    business_rules=DEFAULT_BUSINESS_RULES,
)


def merge_validation_config(
    tenant_config: DateValidationConfig | dict[str, Any] | None,
) -> DateValidationConfig:
    """Fill a (possibly partial) tenant config with defaults.

    Toggles and rule fields fall back one by one; species overrides are
    taken as-is. Idempotent: merging a complete config returns an equal one.

    Args:
        tenant_config: A config, a camelCase/snake_case dict as stored by the
            settings store, or None.
    """
    if tenant_config is None:
        return DEFAULT_VALIDATION_CONFIG
    if isinstance(tenant_config, DateValidationConfig):
        tenant_config = tenant_config.model_dump(by_alias=True)

    return DateValidationConfig.model_validate(_drop_nones(tenant_config))


def _drop_nones(value: dict[str, Any]) -> dict[str, Any]:
    return {
        k: _drop_nones(v) if isinstance(v, dict) else v for k, v in value.items() if v is not None
    }
