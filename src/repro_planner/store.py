"""Local JSON store for state that must survive restarts.

Every file is wrapped in a metadata envelope::

    {"meta": {"source": "...", "written_at": "...", ...}, "data": ...}

Used for the pending warning-override queue (``pending/``). Paths are
relative to the store base and may not escape it.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 (used at runtime)
from typing import Any


class DataStore:
    """Reads and writes metadata-enveloped JSON files under one directory."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir

    def read(self, path: Path) -> Any | None:
        """Read the ``data`` payload, or None if the file doesn't exist."""
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        return envelope.get("data", envelope)

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Read the full envelope (meta + data)."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open() as f:
            result: dict[str, Any] = json.load(f)
        return result

    def write(self, path: Path, data: Any, source: str, **params: Any) -> Path:
        """Write data wrapped in a metadata envelope.

        The file is replaced atomically so a crash never leaves half a queue.

        Args:
            path: Relative path under base_dir (e.g. ``pending/overrides.json``).
            data: JSON-serializable payload stored under ``data``.
            source: Writer identifier (e.g. ``"override-audit"``).
            **params: Extra metadata fields.

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        meta: dict[str, Any] = {
            "source": source,
            "written_at": datetime.now(UTC).isoformat(),
        }
        if params:
            meta.update(params)

        fd, tmp = tempfile.mkstemp(dir=full.parent, prefix=f".{full.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump({"meta": meta, "data": data}, f, indent=2)
            os.replace(tmp, full)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        return full

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full
