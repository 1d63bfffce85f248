"""Durable storage for run state.

State is a single JSON document with the keys ``profileData``,
``currentIndex``, ``results``, ``settings``, ``apiConfig`` and ``lastSaved``.
Writes go to a temp file first and are moved into place, so a crash mid-write
leaves the previous checkpoint intact.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

STATE_KEYS = ("profileData", "currentIndex", "results", "settings", "apiConfig", "lastSaved")


class StateStore(Protocol):
    def load(self) -> dict[str, Any]: ...

    def save(self, values: dict[str, Any]) -> None: ...


class InMemoryStateStore:
    """Dict-backed store for tests; copies through JSON like the file store."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(initial or {})
        self.save_count = 0

    def load(self) -> dict[str, Any]:
        return json.loads(json.dumps(self.data))

    def save(self, values: dict[str, Any]) -> None:
        self.data.update(json.loads(json.dumps(values, default=str)))
        self.save_count += 1


class JsonFileStateStore:
    """Stores state in a JSON file, merging each save into what is on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Could not read state file %s: %s — starting empty", self._path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.error("State file %s does not hold an object — starting empty", self._path)
            return {}
        return {key: raw[key] for key in STATE_KEYS if key in raw}

    def save(self, values: dict[str, Any]) -> None:
        state = self.load()
        state.update(values)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(state, fh, default=str)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
