"""Application event sourcing – AggregateRepository (load/save orchestration)."""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

from pydantic_core import from_json, to_json

from evsource.application.event_sourcing.serialization import EventSerializer
from evsource.application.event_sourcing.snapshot import (
    NeverSnapshotPolicy,
    Snapshot,
    SnapshotPolicy,
    SnapshotStore,
)
from evsource.application.event_sourcing.store import EventStore
from evsource.kernel.ddd.aggregate import AggregateRoot
from evsource.kernel.ddd.domain_event import DomainEvent
from evsource.kernel.errors import (
    AggregateNotFoundError,
    BaseError,
    ConcurrencyConflictError,
    PersistenceError,
    SerializationError,
)
from evsource.kernel.types.ids import SequentialId
from evsource.observability.logging import get_logger

T = TypeVar("T", bound=AggregateRoot)

logger = get_logger(__name__)


class AggregateRepository(Generic[T]):
    """Rebuilds aggregates from snapshot + tail events and persists new events.

    Every :meth:`load` re-reads both stores; nothing is cached between calls,
    so the event store's expected-version check is the only thing that
    serialises concurrent writers of the same aggregate.

    Example::

        repo = AggregateRepository(
            BankAccount,
            event_store=InMemoryEventStore(),
            snapshot_store=InMemorySnapshotStore(),
            snapshot_policy=EveryNEventsPolicy(50),
        )
        account = repo.load(account_id)
        account.debit(Decimal("50"))
        repo.save(account)

    Parameters
    ----------
    aggregate_factory:
        Builds an empty, version-0 aggregate for an id (usually the class).
    serializer:
        Event type registry; defaults to the event types the aggregate class
        declares handlers for.
    metadata_factory:
        Returns infrastructure metadata stored alongside each new event.
    """

    def __init__(
        self,
        aggregate_factory: Callable[[SequentialId], T],
        event_store: EventStore,
        snapshot_store: SnapshotStore | None = None,
        snapshot_policy: SnapshotPolicy | None = None,
        serializer: EventSerializer | None = None,
        metadata_factory: Callable[[DomainEvent], dict[str, Any]] | None = None,
    ) -> None:
        self._factory = aggregate_factory
        self._event_store = event_store
        self._snapshot_store = snapshot_store
        self._snapshot_policy: SnapshotPolicy = snapshot_policy or NeverSnapshotPolicy()
        if serializer is None and isinstance(aggregate_factory, type):
            serializer = EventSerializer.for_dispatchers(aggregate_factory)
        if serializer is None:
            raise TypeError("serializer is required when aggregate_factory is not a class")
        self._serializer = serializer
        self._metadata_factory = metadata_factory or (lambda _: {})

    @property
    def serializer(self) -> EventSerializer:
        return self._serializer

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self, aggregate_id: SequentialId | str) -> T:
        """Return the aggregate at its latest stored version.

        Raises :class:`~evsource.kernel.errors.AggregateNotFoundError` when
        neither a snapshot nor any event exists for *aggregate_id*.
        """
        aggregate_id = SequentialId.coerce(aggregate_id)
        aggregate = self._factory(aggregate_id)

        snapshot = self._load_snapshot(aggregate_id)
        if snapshot is not None:
            aggregate.restore_snapshot(snapshot.version, self._decode_state(snapshot))

        stored = self._event_store.read_from(aggregate_id, aggregate.version)
        if snapshot is None and not stored:
            raise AggregateNotFoundError(aggregate_id, type(aggregate).__name__)

        aggregate.replay_events(self._serializer.from_stored(e) for e in stored)
        logger.debug(
            "aggregate.loaded",
            aggregate_type=type(aggregate).__name__,
            aggregate_id=str(aggregate_id),
            version=aggregate.version,
            snapshot_version=snapshot.version if snapshot is not None else None,
            replayed=len(stored),
        )
        return aggregate

    def exists(self, aggregate_id: SequentialId | str) -> bool:
        aggregate_id = SequentialId.coerce(aggregate_id)
        if self._event_store.last_sequence(aggregate_id) > 0:
            return True
        return self._load_snapshot(aggregate_id) is not None

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self, aggregate: T, expected_version: int | None = None) -> None:
        """Append the aggregate's uncommitted events.

        *expected_version* defaults to the version the aggregate had before
        its uncommitted events were applied.  On success the buffer is
        cleared and the snapshot policy is consulted.
        """
        events = aggregate.uncommitted_events
        if not events:
            return

        loaded_version = aggregate.loaded_version
        if expected_version is None:
            expected_version = loaded_version
        elif expected_version != loaded_version:
            raise ConcurrencyConflictError(aggregate.id, expected_version, loaded_version)

        stored = [self._serializer.to_stored(e, self._metadata_factory(e)) for e in events]
        self._event_store.append(aggregate.id, expected_version, stored)
        aggregate.mark_committed()
        logger.info(
            "aggregate.saved",
            aggregate_type=type(aggregate).__name__,
            aggregate_id=str(aggregate.id),
            expected_version=expected_version,
            version=aggregate.version,
            events=len(stored),
        )

        if self._snapshot_store is not None and self._snapshot_policy.should_snapshot(
            expected_version, aggregate.version
        ):
            self.take_snapshot(aggregate)

    def take_snapshot(self, aggregate: T) -> Snapshot | None:
        """Write a snapshot of *aggregate* at its current version.

        Returns ``None`` when there is no snapshot store or the aggregate type
        does not implement snapshot hooks.  Store failures surface as
        :class:`~evsource.kernel.errors.PersistenceError`.
        """
        if self._snapshot_store is None or not aggregate.supports_snapshots():
            return None
        try:
            state = to_json(aggregate.snapshot_state())
        except (TypeError, ValueError) as exc:
            raise SerializationError(
                f"Cannot encode {type(aggregate).__name__} state: {exc}",
                payload_type=type(aggregate).__name__,
                cause=exc,
            ) from exc
        snapshot = Snapshot(
            aggregate_id=aggregate.id,
            version=aggregate.version,
            state=state,
            aggregate_type=type(aggregate).__name__,
        )
        try:
            self._snapshot_store.save(snapshot)
        except BaseError:
            raise
        except Exception as exc:
            raise PersistenceError(
                f"Failed to save snapshot of {aggregate.id} at version {snapshot.version}",
                store=type(self._snapshot_store).__name__,
                cause=exc,
            ) from exc
        logger.info(
            "snapshot.taken",
            aggregate_type=snapshot.aggregate_type,
            aggregate_id=str(aggregate.id),
            version=snapshot.version,
        )
        return snapshot

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_snapshot(self, aggregate_id: SequentialId) -> Snapshot | None:
        if self._snapshot_store is None:
            return None
        return self._snapshot_store.load(aggregate_id)

    @staticmethod
    def _decode_state(snapshot: Snapshot) -> dict[str, Any]:
        try:
            state = from_json(snapshot.state)
        except ValueError as exc:
            raise SerializationError(
                f"Corrupt snapshot for {snapshot.aggregate_id} at version {snapshot.version}",
                payload_type=snapshot.aggregate_type,
                cause=exc,
            ) from exc
        if not isinstance(state, dict):
            raise SerializationError(
                f"Snapshot state for {snapshot.aggregate_id} is not an object",
                payload_type=snapshot.aggregate_type,
            )
        return state


__all__ = ["AggregateRepository"]
