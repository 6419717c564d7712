"""
Date-only helpers shared by the engine and the validator.

Every date in the engine is a ``datetime.date``: no times, no timezones.
Raw values coming from stored records are strict ``YYYY-MM-DD`` strings;
anything else is treated as unparsable.

Month arithmetic here is calendar-month based (``months_between``). The
projector's horizon uses a flat 30-day month instead, see
``engine/projection.py``.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: object) -> date | None:
    """Parse a strict date-only value.

    Accepts ``date`` objects (a ``datetime`` is truncated to its date) and
    ``YYYY-MM-DD`` strings. Returns None for anything else, including
    impossible calendar dates like ``2024-02-30``.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def normalize_cycle_starts(values: Iterable[object] | None) -> list[date]:
    """Canonicalize an animal's recorded cycle-start dates.

    Unparsable entries are dropped silently; the caller decides whether to
    log them. The result is ascending with duplicates collapsed.
    """
    if not values:
        return []
    parsed = {d for d in (parse_iso_date(v) for v in values) if d is not None}
    return sorted(parsed)


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def days_between(earlier: date, later: date) -> int:
    """Signed whole days from ``earlier`` to ``later``."""
    return (later - earlier).days


def months_between(earlier: date, later: date) -> int:
    """Signed calendar-month difference, ignoring the day of month."""
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (``round()`` is banker's rounding)."""
    return math.floor(value + 0.5)
