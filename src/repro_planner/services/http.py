"""
Shared HTTP client with automatic retry and backoff.

Provides a pre-configured ``requests.Session`` that retries on transient
network errors (timeouts, connection resets, 502/503/504) with exponential
backoff. The settings store and the audit log use this instead of bare
``requests`` calls.

Usage::

    from repro_planner.services.http import session

    resp = session.get(f"{base}/api/v1/tenants/1/settings/date-validation", timeout=10)
    resp.raise_for_status()
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

#: Override-log writes carry an Idempotency-Key, so POST and PUT are safe to retry.
DEFAULT_RETRY = Retry(
    total=3,
    backoff_factor=1,  # 0s, 1s, 2s between retries
    status_forcelist=[429, 502, 503, 504],
    allowed_methods=["GET", "HEAD", "OPTIONS", "PUT", "POST"],
    raise_on_status=False,  # callers inspect resp.ok
)

DEFAULT_TIMEOUT = 10  # seconds

USER_AGENT = "repro-planner/0.1"


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with retry adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``DEFAULT_RETRY``).
        timeout: Default timeout applied to every request that doesn't pass one.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = USER_AGENT
    s.headers["Accept"] = "application/json"

    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = timeout
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


def tenant_headers(tenant_id: str | int) -> dict[str, str]:
    """Headers the API uses to scope a request to one tenant."""
    return {"x-tenant-id": str(tenant_id), "X-Requested-With": "XMLHttpRequest"}


#: Module-level session, import and use directly.
session: requests.Session = create_session()
