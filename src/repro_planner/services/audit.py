"""
Audit log for validation warnings a user chose to proceed past.

Each acknowledged warning becomes a ``WarningOverride`` posted to
``/api/v1/tenants/{tenant}/breeding-plans/{plan}/validation-overrides``.
Writes carry an ``Idempotency-Key`` so that a retried POST never creates a
second record.

Recording is best effort: a failed write is queued (persisted through
``DataStore`` when one is given) and retried later by ``retry_pending``,
usually from the ``retry-pending-overrides`` flow. Nothing here raises on
transport problems.

Example:
    trail = OverrideAuditTrail(OverrideLogClient(), store=DataStore(Path("data")))
    ctx = AuditContext(tenant_id=1, plan_id=77, user_name="sam@example.com")
    trail.record_warnings(result.warnings, "birth", "2024-03-01", ctx)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import requests
from pydantic import ValidationError as PydanticValidationError

from repro_planner.config import get_settings
from repro_planner.services.http import session, tenant_headers
from repro_planner.validation.models import WarningOverride

if TYPE_CHECKING:
    from collections.abc import Iterable

    from repro_planner.store import DataStore
    from repro_planner.validation.models import ValidationWarning

logger = logging.getLogger(__name__)

PENDING_PATH = Path("pending/validation_overrides.json")
STORE_SOURCE = "override-audit"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AuditContext:
    """Who acknowledged warnings, on which plan."""

    tenant_id: str | int
    plan_id: str | int
    user_id: str | int | None = None
    user_name: str | None = None

    @property
    def acknowledged_by(self) -> str:
        return self.user_name or str(self.user_id or "unknown")


def idempotency_key(plan_id: str | int, override: WarningOverride) -> str:
    """``plan:field:code:acknowledged_at``; identical acknowledgements share a key."""
    return f"{plan_id}:{override.field}:{override.warning_code}:{override.acknowledged_at.isoformat()}"


def overrides_from_warnings(
    warnings: Iterable[ValidationWarning],
    field: str,
    value: str,
    acknowledged_by: str,
    acknowledged_at: datetime,
) -> list[WarningOverride]:
    """One override record per warning, all stamped with the same time."""
    return [
        WarningOverride(
            warning_code=w.code,
            field=field,
            acknowledged_at=acknowledged_at,
            acknowledged_by=acknowledged_by,
            message=w.message,
            value_entered=value,
        )
        for w in warnings
    ]


@dataclass
class PendingOverride:
    """A queued override write that has not reached the server yet."""

    tenant_id: str
    plan_id: str
    override: WarningOverride
    key: str
    attempts: int = 0
    last_attempt: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenantId": self.tenant_id,
            "planId": self.plan_id,
            "override": self.override.to_json_dict(),
            "key": self.key,
            "attempts": self.attempts,
            "lastAttempt": self.last_attempt.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> PendingOverride:
        return cls(
            tenant_id=str(raw["tenantId"]),
            plan_id=str(raw["planId"]),
            override=WarningOverride.model_validate(raw["override"]),
            key=raw["key"],
            attempts=int(raw.get("attempts", 0)),
            last_attempt=datetime.fromisoformat(raw["lastAttempt"]),
        )


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


class OverrideLogClient:
    """POST/GET against the plan's validation-overrides resource.

    Methods raise ``requests.RequestException`` on transport failure;
    ``OverrideAuditTrail`` is the layer that swallows and queues.
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout or settings.api_timeout

    def url(self, plan_id: str | int, tenant_id: str | int) -> str:
        tenant = quote(str(tenant_id), safe="")
        plan = quote(str(plan_id), safe="")
        return f"{self.base_url}/api/v1/tenants/{tenant}/breeding-plans/{plan}/validation-overrides"

    def post(
        self,
        override: WarningOverride,
        plan_id: str | int,
        tenant_id: str | int,
        key: str,
        timeout: float | None = None,
    ) -> bool:
        """Write one override. True on a 2xx response."""
        resp = session.post(
            self.url(plan_id, tenant_id),
            json=override.to_json_dict(),
            headers={**tenant_headers(tenant_id), "Idempotency-Key": key},
            timeout=timeout or self.timeout,
        )
        return bool(resp.ok)

    def list(
        self, plan_id: str | int, tenant_id: str | int, timeout: float | None = None
    ) -> list[WarningOverride]:
        """All overrides recorded for a plan; a 404 means none."""
        resp = session.get(
            self.url(plan_id, tenant_id),
            headers=tenant_headers(tenant_id),
            timeout=timeout or self.timeout,
        )
        if resp.status_code == 404:
            return []
        resp.raise_for_status()
        body = resp.json()
        items = body.get("data", []) if isinstance(body, dict) else body
        return [WarningOverride.model_validate(item) for item in items or []]


# ---------------------------------------------------------------------------
# Audit trail
# ---------------------------------------------------------------------------


class OverrideAuditTrail:
    """Best-effort override recording with a bounded, persistent retry queue.

    Thread-safe. The lock guards the key sets and the queue and is never
    held during HTTP or disk I/O. Saves are serialized by a second lock and
    always write the queue as it is at write time.
    """

    def __init__(
        self,
        client: OverrideLogClient,
        store: DataStore | None = None,
        max_attempts: int = 5,
        max_pending: int = 500,
    ) -> None:
        self.client = client
        self.store = store
        self.max_attempts = max_attempts
        self.max_pending = max_pending
        self._lock = threading.Lock()
        self._save_lock = threading.Lock()
        self._in_flight: set[str] = set()
        self._acknowledged: set[str] = set()
        self._pending: list[PendingOverride] = self._load()

    @property
    def pending(self) -> list[PendingOverride]:
        """Snapshot of the retry queue, oldest first."""
        with self._lock:
            return list(self._pending)

    # -- recording ----------------------------------------------------------

    def record(
        self,
        override: WarningOverride,
        plan_id: str | int,
        tenant_id: str | int,
        timeout: float | None = None,
    ) -> bool:
        """Write one override; queue it for retry on failure.

        Returns True once the server has confirmed this override (now or
        earlier), False if it was queued or is already being written.
        """
        key = idempotency_key(plan_id, override)
        with self._lock:
            if key in self._acknowledged:
                return True
            if key in self._in_flight:
                logger.debug("Override %s already in flight, skipping", key)
                return False
            self._in_flight.add(key)

        ok = self._send(override, plan_id, tenant_id, key, timeout)

        with self._lock:
            self._in_flight.discard(key)
            if ok:
                self._acknowledged.add(key)
                self._pending = [p for p in self._pending if p.key != key]
            elif not any(p.key == key for p in self._pending):
                self._enqueue(PendingOverride(str(tenant_id), str(plan_id), override, key))

        if not ok:
            logger.warning(
                "Failed to log override for %s, stored for retry: %s", override.field, override.warning_code
            )
        self._save()
        return ok

    def record_warnings(
        self,
        warnings: Iterable[ValidationWarning],
        field: str,
        value: str,
        context: AuditContext,
        acknowledged_at: datetime | None = None,
        timeout: float | None = None,
    ) -> int:
        """Record every warning the user proceeded past on one field.

        Returns the number confirmed by the server.
        """
        overrides = overrides_from_warnings(
            warnings,
            field,
            value,
            acknowledged_by=context.acknowledged_by,
            acknowledged_at=acknowledged_at or datetime.now(UTC),
        )
        return sum(self.record(o, context.plan_id, context.tenant_id, timeout=timeout) for o in overrides)

    def retry_pending(self, timeout: float | None = None) -> int:
        """Retry every queued override once. Returns how many succeeded."""
        with self._lock:
            items = list(self._pending)

        succeeded = 0
        for item in items:
            with self._lock:
                if item.key in self._in_flight:
                    continue
                if item.attempts >= self.max_attempts:
                    self._drop(item, "too many attempts")
                    continue
                self._in_flight.add(item.key)

            ok = self._send(item.override, item.plan_id, item.tenant_id, item.key, timeout)

            with self._lock:
                self._in_flight.discard(item.key)
                if ok:
                    self._acknowledged.add(item.key)
                    self._pending = [p for p in self._pending if p.key != item.key]
                    succeeded += 1
                else:
                    item.attempts += 1
                    item.last_attempt = datetime.now(UTC)
                    if item.attempts >= self.max_attempts:
                        self._drop(item, f"gave up after {item.attempts} attempts")

        remaining = self._save()
        if items:
            logger.info("Retried %d pending overrides: %d succeeded, %d still queued", len(items), succeeded, remaining)
        return succeeded

    # -- queries ------------------------------------------------------------

    def fetch_overrides(
        self, plan_id: str | int, tenant_id: str | int, timeout: float | None = None
    ) -> list[WarningOverride]:
        """Overrides recorded for a plan, or [] if they can't be fetched."""
        try:
            return self.client.list(plan_id, tenant_id, timeout=timeout)
        except (requests.RequestException, ValueError, TypeError, PydanticValidationError) as e:
            logger.warning("Failed to fetch overrides for plan %s: %s", plan_id, e)
            return []

    def plan_has_overrides(self, plan_id: str | int, tenant_id: str | int) -> bool:
        return bool(self.fetch_overrides(plan_id, tenant_id))

    # -- internals (call with the lock held where noted) --------------------

    def _send(
        self,
        override: WarningOverride,
        plan_id: str | int,
        tenant_id: str | int,
        key: str,
        timeout: float | None,
    ) -> bool:
        try:
            return self.client.post(override, plan_id, tenant_id, key, timeout=timeout)
        except requests.RequestException as e:
            logger.warning("Override log request for plan %s failed: %s", plan_id, e)
            return False

    def _enqueue(self, item: PendingOverride) -> None:
        # lock held
        self._pending.append(item)
        while len(self._pending) > self.max_pending:
            self._drop(self._pending[0], "queue full")

    def _drop(self, item: PendingOverride, reason: str) -> None:
        # lock held
        self._pending = [p for p in self._pending if p.key != item.key]
        logger.warning("Dropping pending override %s (%s)", item.key, reason)

    def _load(self) -> list[PendingOverride]:
        if self.store is None:
            return []
        try:
            raw = self.store.read(PENDING_PATH) or []
            return [PendingOverride.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding unreadable pending-override queue: %s", e)
            return []

    def _save(self) -> int:
        """Persist the current queue. Returns its length."""
        with self._save_lock:
            with self._lock:
                snapshot = [p.to_dict() for p in self._pending]
            if self.store is None:
                return len(snapshot)
            try:
                self.store.write(PENDING_PATH, snapshot, source=STORE_SOURCE)
            except OSError as e:
                logger.warning("Could not persist pending-override queue: %s", e)
        return len(snapshot)
