"""JSON file adapter – JsonFileSnapshotStore."""
from __future__ import annotations

import os
import threading
from datetime import datetime

from evsource.adapters.jsonfile._document import JsonDocument
from evsource.application.event_sourcing.snapshot import Snapshot, SnapshotStore
from evsource.kernel.errors import PersistenceError
from evsource.kernel.types.ids import SequentialId


class JsonFileSnapshotStore(SnapshotStore):
    """Keeps the newest snapshot of each aggregate in one JSON file."""

    def __init__(self, path: str | os.PathLike[str] = "snapshots.json") -> None:
        self._document = JsonDocument(path)
        self._lock = threading.Lock()

    def save(self, snapshot: Snapshot) -> None:
        key = str(snapshot.aggregate_id)
        with self._lock:
            data = self._document.read()
            current = data.get(key)
            if current is not None and current["version"] > snapshot.version:
                return
            data[key] = {
                "version": snapshot.version,
                "aggregate_type": snapshot.aggregate_type,
                "state": snapshot.state.decode("utf-8"),
                "taken_at": snapshot.taken_at.isoformat(),
            }
            self._document.write(data)

    def load(self, aggregate_id: SequentialId) -> Snapshot | None:
        with self._lock:
            record = self._document.read().get(str(aggregate_id))
        if record is None:
            return None
        try:
            return Snapshot(
                aggregate_id=aggregate_id,
                version=int(record["version"]),
                state=record["state"].encode("utf-8"),
                aggregate_type=record.get("aggregate_type", ""),
                taken_at=datetime.fromisoformat(record["taken_at"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Malformed snapshot record: {exc}", store="jsonfile", cause=exc) from exc


__all__ = ["JsonFileSnapshotStore"]
