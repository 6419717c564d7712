"""
Domain models for repro planner inputs.

Pydantic models for data assembled by callers from stored records. These
define the canonical shape; the engine never loads records itself.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from repro_planner.dates import normalize_cycle_starts

# =============================================================================
# Animal reproductive summary
# =============================================================================


class ReproSummary(BaseModel):
    """What the engine knows about one breeding female."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    animal_id: str = Field(..., description="Caller's animal identifier")
    species: str = Field(..., description="Species code, e.g. DOG")
    dob: date | None = None
    last_birth: date | None = None
    cycle_starts_asc: list[date] = Field(default_factory=list)
    cycle_len_override_days: float | None = None
    today: date = Field(..., description="Reference date supplied by the caller")

    @field_validator("animal_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("species")
    @classmethod
    def _upper_species(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("cycle_starts_asc", mode="before")
    @classmethod
    def _normalize_history(cls, value: Any) -> list[date]:
        return normalize_cycle_starts(value)

    @property
    def last_cycle_start(self) -> date | None:
        return self.cycle_starts_asc[-1] if self.cycle_starts_asc else None

