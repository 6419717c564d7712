"""
Tenant date-validation config, stored in the settings API.

GET/PUT ``{base}/api/v1/tenants/{tenant}/settings/{namespace}``. The body is
either the config itself or ``{"data": config}``. A 404 or an empty body
means the tenant never saved one.

Nothing here raises on transport problems. ``fetch_validation_config``
returns a ``ConfigFetch`` whose ``error`` says what went wrong, and callers
pick the fallback explicitly with ``unwrap_or``.

Example:
    from repro_planner.services import settings_store
    config = settings_store.load_validation_config(tenant_id=42)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests
from pydantic import ValidationError as PydanticValidationError

from repro_planner.config import get_settings
from repro_planner.services.http import session, tenant_headers
from repro_planner.validation.defaults import DEFAULT_VALIDATION_CONFIG, merge_validation_config
from repro_planner.validation.models import DateValidationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigFetch:
    """Outcome of a config fetch.

    ``config`` is None when the tenant has none saved or the fetch failed;
    ``error`` is set only for failures.
    """

    config: DateValidationConfig | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: DateValidationConfig) -> DateValidationConfig:
        return self.config if self.config is not None else default


def settings_url(tenant_id: str | int, namespace: str | None = None, base_url: str | None = None) -> str:
    settings = get_settings()
    base = (base_url or settings.api_base_url).rstrip("/")
    ns = namespace or settings.settings_namespace
    return f"{base}/api/v1/tenants/{quote(str(tenant_id), safe='')}/settings/{quote(ns, safe='')}"


def _unwrap_body(body: Any) -> dict[str, Any] | None:
    if isinstance(body, dict) and "data" in body:
        body = body["data"]
    if not body:
        return None
    if not isinstance(body, dict):
        msg = f"expected a JSON object, got {type(body).__name__}"
        raise TypeError(msg)
    return body


def fetch_validation_config(
    tenant_id: str | int,
    *,
    namespace: str | None = None,
    base_url: str | None = None,
    timeout: float | None = None,
) -> ConfigFetch:
    """Fetch and merge a tenant's validation config. Never raises."""
    url = settings_url(tenant_id, namespace, base_url)
    try:
        resp = session.get(url, headers=tenant_headers(tenant_id), timeout=timeout or get_settings().api_timeout)
    except requests.RequestException as e:
        logger.warning("Config fetch for tenant %s failed: %s", tenant_id, e)
        return ConfigFetch(error=f"request failed: {e}")

    if resp.status_code == 404:
        logger.debug("Tenant %s has no saved validation config", tenant_id)
        return ConfigFetch()
    if not resp.ok:
        logger.warning("Config fetch for tenant %s returned HTTP %s", tenant_id, resp.status_code)
        return ConfigFetch(error=f"HTTP {resp.status_code}")
    if not resp.content:
        return ConfigFetch()

    try:
        raw = _unwrap_body(resp.json())
        if raw is None:
            return ConfigFetch()
        return ConfigFetch(config=merge_validation_config(raw))
    except (ValueError, TypeError, PydanticValidationError) as e:
        logger.warning("Config for tenant %s is malformed: %s", tenant_id, e)
        return ConfigFetch(error=f"malformed config: {e}")


def load_validation_config(tenant_id: str | int, **kwargs: Any) -> DateValidationConfig:
    """Tenant config, or the defaults when absent or unreachable."""
    return fetch_validation_config(tenant_id, **kwargs).unwrap_or(DEFAULT_VALIDATION_CONFIG)


def save_validation_config(
    tenant_id: str | int,
    config: DateValidationConfig,
    *,
    namespace: str | None = None,
    base_url: str | None = None,
    timeout: float | None = None,
) -> bool:
    """PUT a tenant's config. Returns False (and logs) on any failure."""
    url = settings_url(tenant_id, namespace, base_url)
    try:
        resp = session.put(
            url,
            json=config.to_json_dict(),
            headers=tenant_headers(tenant_id),
            timeout=timeout or get_settings().api_timeout,
        )
    except requests.RequestException as e:
        logger.warning("Config save for tenant %s failed: %s", tenant_id, e)
        return False

    if not resp.ok:
        logger.warning("Config save for tenant %s returned HTTP %s", tenant_id, resp.status_code)
        return False
    logger.info("Saved validation config for tenant %s", tenant_id)
    return True
