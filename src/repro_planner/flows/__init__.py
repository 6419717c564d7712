"""
Prefect flows for background work.

Flows:
- retry_overrides: drain the pending warning-override queue into the audit log

Usage (local):
    python -m repro_planner.flows.retry_overrides

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    prefect deployment run 'retry-pending-overrides/default'
"""
