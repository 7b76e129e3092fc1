"""JSON file adapter – shared read/replace helpers for single-document stores."""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from evsource.kernel.errors import PersistenceError


class JsonDocument:
    """A JSON object persisted in one file, rewritten atomically on every change."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Cannot read {self.path}", store="jsonfile", cause=exc) from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"{self.path} does not contain a JSON object", store="jsonfile")
        return data

    def write(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {self.path}", store="jsonfile", cause=exc) from exc


__all__ = ["JsonDocument"]
