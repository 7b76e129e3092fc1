"""Application event sourcing – EventStore port and InMemoryEventStore."""

from __future__ import annotations

import abc
import threading
from collections.abc import Sequence

from evsource.application.event_sourcing.stored_event import StoredEvent
from evsource.kernel.errors import ConcurrencyConflictError, PersistenceError
from evsource.kernel.types.ids import SequentialId
from evsource.observability.logging import get_logger

logger = get_logger(__name__)


class EventStore(abc.ABC):
    """Port – durable append-only event store.

    ``expected_version`` is used for **optimistic concurrency control**:

    - Pass ``0`` when creating a new aggregate (no events exist yet).
    - Pass the sequence of the last event the writer has seen otherwise.
    - The store raises :class:`~evsource.kernel.errors.ConcurrencyConflictError`
      if its latest stored sequence differs from *expected_version*, and
      stores nothing in that case.

    Any other backend failure surfaces as
    :class:`~evsource.kernel.errors.PersistenceError`.
    """

    @abc.abstractmethod
    def append(
        self,
        aggregate_id: SequentialId,
        expected_version: int,
        events: Sequence[StoredEvent],
    ) -> None:
        """Store *events* atomically, enforcing optimistic locking."""

    @abc.abstractmethod
    def read_from(
        self,
        aggregate_id: SequentialId,
        after_version: int = 0,
    ) -> list[StoredEvent]:
        """Return events with ``sequence > after_version`` in ascending order."""

    @abc.abstractmethod
    def last_sequence(self, aggregate_id: SequentialId) -> int:
        """Return the latest stored sequence (``0`` for an unknown aggregate)."""


def check_batch(
    aggregate_id: SequentialId,
    expected_version: int,
    events: Sequence[StoredEvent],
) -> None:
    """Reject batches whose sequences do not continue from *expected_version*.

    Shared by every store implementation before anything is written.
    """
    for offset, event in enumerate(events, start=1):
        if event.aggregate_id != aggregate_id:
            raise PersistenceError(
                f"Event #{event.sequence} belongs to aggregate {event.aggregate_id}, "
                f"not {aggregate_id}",
            )
        if event.sequence != expected_version + offset:
            raise PersistenceError(
                f"Event sequence {event.sequence} does not follow expected version "
                f"{expected_version} for aggregate {aggregate_id}",
            )


class InMemoryEventStore(EventStore):
    """In-memory :class:`EventStore` for tests and local development.

    A single lock serialises appends so the version check and the write are
    one atomic step, even when several threads save the same aggregate.
    """

    def __init__(self) -> None:
        # aggregate id → ordered list of StoredEvent
        self._streams: dict[SequentialId, list[StoredEvent]] = {}
        self._lock = threading.Lock()

    def append(
        self,
        aggregate_id: SequentialId,
        expected_version: int,
        events: Sequence[StoredEvent],
    ) -> None:
        check_batch(aggregate_id, expected_version, events)
        with self._lock:
            stream = self._streams.get(aggregate_id, [])
            actual_version = stream[-1].sequence if stream else 0
            if actual_version != expected_version:
                logger.warning(
                    "event_store.conflict",
                    aggregate_id=str(aggregate_id),
                    expected=expected_version,
                    actual=actual_version,
                )
                raise ConcurrencyConflictError(aggregate_id, expected_version, actual_version)
            self._streams[aggregate_id] = [*stream, *events]

    def read_from(
        self,
        aggregate_id: SequentialId,
        after_version: int = 0,
    ) -> list[StoredEvent]:
        with self._lock:
            stream = self._streams.get(aggregate_id, [])
        return [e for e in stream if e.sequence > after_version]

    def last_sequence(self, aggregate_id: SequentialId) -> int:
        with self._lock:
            stream = self._streams.get(aggregate_id)
        return stream[-1].sequence if stream else 0

    def all_events(self, aggregate_id: SequentialId | None = None) -> list[StoredEvent]:
        """Return all stored events, optionally filtered by *aggregate_id*."""
        with self._lock:
            if aggregate_id is not None:
                return list(self._streams.get(aggregate_id, []))
            return [e for stream in self._streams.values() for e in stream]


__all__ = ["EventStore", "InMemoryEventStore", "check_batch"]
