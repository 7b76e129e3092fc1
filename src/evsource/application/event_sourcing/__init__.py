"""Application – Event Sourcing."""

from evsource.application.event_sourcing.repository import AggregateRepository
from evsource.application.event_sourcing.serialization import EventSerializer
from evsource.application.event_sourcing.snapshot import (
    EveryNEventsPolicy,
    EverySavePolicy,
    InMemorySnapshotStore,
    NeverSnapshotPolicy,
    Snapshot,
    SnapshotPolicy,
    SnapshotStore,
)
from evsource.application.event_sourcing.store import (
    EventStore,
    InMemoryEventStore,
    check_batch,
)
from evsource.application.event_sourcing.stored_event import StoredEvent

__all__ = [
    "AggregateRepository",
    "EventSerializer",
    "EventStore",
    "EveryNEventsPolicy",
    "EverySavePolicy",
    "InMemoryEventStore",
    "InMemorySnapshotStore",
    "NeverSnapshotPolicy",
    "Snapshot",
    "SnapshotPolicy",
    "SnapshotStore",
    "StoredEvent",
    "check_batch",
]
