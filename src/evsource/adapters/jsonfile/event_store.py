"""JSON file adapter – JsonFileEventStore."""
from __future__ import annotations

import os
import threading
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from evsource.adapters.jsonfile._document import JsonDocument
from evsource.application.event_sourcing.store import EventStore, check_batch
from evsource.application.event_sourcing.stored_event import StoredEvent
from evsource.kernel.errors import ConcurrencyConflictError, PersistenceError
from evsource.kernel.types.ids import SequentialId
from evsource.observability.logging import get_logger

logger = get_logger(__name__)


class JsonFileEventStore(EventStore):
    """Event store keeping every stream in a single JSON file.

    Suited to demos and single-process tools: a lock guards the
    read-check-write cycle within the process, and the file is replaced
    atomically so a crash never leaves half a batch on disk.  There is no
    cross-process locking.
    """

    def __init__(self, path: str | os.PathLike[str] = "events.json") -> None:
        self._document = JsonDocument(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return str(self._document.path)

    def append(
        self,
        aggregate_id: SequentialId,
        expected_version: int,
        events: Sequence[StoredEvent],
    ) -> None:
        check_batch(aggregate_id, expected_version, events)
        key = str(aggregate_id)
        with self._lock:
            data = self._document.read()
            stream = data.get(key, [])
            actual_version = stream[-1]["sequence"] if stream else 0
            if actual_version != expected_version:
                logger.warning(
                    "event_store.conflict",
                    aggregate_id=key,
                    expected=expected_version,
                    actual=actual_version,
                )
                raise ConcurrencyConflictError(aggregate_id, expected_version, actual_version)
            data[key] = stream + [self._to_record(e) for e in events]
            self._document.write(data)

    def read_from(
        self,
        aggregate_id: SequentialId,
        after_version: int = 0,
    ) -> list[StoredEvent]:
        with self._lock:
            stream = self._document.read().get(str(aggregate_id), [])
        events = [self._from_record(r) for r in stream if r["sequence"] > after_version]
        return sorted(events, key=lambda e: e.sequence)

    def last_sequence(self, aggregate_id: SequentialId) -> int:
        with self._lock:
            stream = self._document.read().get(str(aggregate_id), [])
        return stream[-1]["sequence"] if stream else 0

    @staticmethod
    def _to_record(event: StoredEvent) -> dict[str, Any]:
        return {
            "aggregate_id": str(event.aggregate_id),
            "sequence": event.sequence,
            "event_type": event.event_type,
            "payload": event.payload.decode("utf-8"),
            "event_id": str(event.event_id),
            "event_date": event.event_date.isoformat(),
            "metadata": event.metadata,
        }

    @staticmethod
    def _from_record(record: dict[str, Any]) -> StoredEvent:
        try:
            return StoredEvent(
                aggregate_id=SequentialId.from_str(record["aggregate_id"]),
                sequence=int(record["sequence"]),
                event_type=record["event_type"],
                payload=record["payload"].encode("utf-8"),
                event_id=SequentialId.from_str(record["event_id"]),
                event_date=datetime.fromisoformat(record["event_date"]),
                metadata=record.get("metadata") or {},
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Malformed event record: {exc}", store="jsonfile", cause=exc) from exc


__all__ = ["JsonFileEventStore"]
