"""Repro Planner - reproductive-cycle projection and breeding-plan date validation.

Architecture::

    reference/     Static species constants (timing + biology bounds)
    dates.py       Date parsing/normalization and day/month arithmetic
    schemas.py     Animal summary model consumed by the engine
    engine/        Pure functions: cycle length -> projections -> timelines
    validation/    Plan-date rules: hard errors + overridable warnings
    services/      HTTP clients (tenant config store, override audit log)
    store.py       JSON envelope store for the pending-override queue
    flows/         Prefect orchestration (retry pending override writes)

Data flow: registry -> cycle length -> projector -> (caller picks seed) -> timeline;
registry + tenant config -> validator -> (user proceeds) -> audit trail.

Extension points, see each package's docstring:
  - New species:   engine/__init__.py
  - New rule:      validation/validate.py (add a code in validation/codes.py)
"""

__version__ = "0.1.0"

from repro_planner.config import Settings
from repro_planner.schemas import ReproSummary

__all__ = ["ReproSummary", "Settings", "__version__"]
