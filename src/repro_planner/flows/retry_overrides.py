"""
Prefect flow that retries override-log writes which failed earlier.

The queue is the ``pending/validation_overrides.json`` file under
``Settings.data_dir``; run this on a schedule or after connectivity returns.

Run locally:
    python -m repro_planner.flows.retry_overrides
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from prefect import flow, task

from repro_planner.config import get_settings
from repro_planner.services.audit import OverrideAuditTrail, OverrideLogClient
from repro_planner.store import DataStore


def build_trail(data_dir: Path | None = None, base_url: str | None = None) -> OverrideAuditTrail:
    """Audit trail wired to the configured API and on-disk queue."""
    settings = get_settings()
    return OverrideAuditTrail(
        OverrideLogClient(base_url=base_url),
        store=DataStore(data_dir or settings.data_dir),
        max_attempts=settings.audit_max_attempts,
        max_pending=settings.audit_max_pending,
    )


@task(name="count-pending-overrides")
def count_pending(data_dir: str) -> int:
    """Number of overrides waiting in the on-disk queue."""
    return len(build_trail(Path(data_dir)).pending)


@task(name="drain-pending-overrides")
def drain_pending(data_dir: str, base_url: str | None = None) -> dict[str, int]:
    """Retry every queued override once."""
    trail = build_trail(Path(data_dir), base_url)
    succeeded = trail.retry_pending()
    return {"succeeded": succeeded, "still_pending": len(trail.pending)}


@flow(name="retry-pending-overrides", log_prints=True)
def retry_pending_overrides(data_dir: str | None = None, base_url: str | None = None) -> dict[str, Any]:
    """
    Drain the pending-override queue.

    Returns:
        Summary with ``pending_before``, ``succeeded`` and ``still_pending``.
    """
    directory = data_dir or str(get_settings().data_dir)

    pending_before = count_pending(directory)
    if pending_before == 0:
        print("No pending overrides.")
        return {"pending_before": 0, "succeeded": 0, "still_pending": 0}

    print(f"Retrying {pending_before} pending overrides...")
    outcome = drain_pending(directory, base_url)
    print(f"{outcome['succeeded']} logged, {outcome['still_pending']} still pending.")
    return {"pending_before": pending_before, **outcome}


if __name__ == "__main__":
    retry_pending_overrides()
