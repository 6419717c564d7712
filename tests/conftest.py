"""Shared fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from repro_planner.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Fresh settings per test, pointed at a fake API and a temp data dir."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("REPRO_API_BASE_URL", "https://api.test")
    monkeypatch.setenv("REPRO_DATA_DIR", str(tmp_path / "data"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
