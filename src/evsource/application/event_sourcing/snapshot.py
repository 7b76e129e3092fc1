"""Application event sourcing – Snapshot, SnapshotStore port and snapshot policies."""

from __future__ import annotations

import abc
import dataclasses
import threading
from datetime import UTC, datetime
from typing import Protocol

from evsource.config.validation import InvalidSettingValueError
from evsource.kernel.types.ids import SequentialId


@dataclasses.dataclass(frozen=True)
class Snapshot:
    """Aggregate state as of exactly ``version`` applied events."""

    aggregate_id: SequentialId
    version: int
    state: bytes
    """JSON-encoded output of ``AggregateRoot.snapshot_state()``."""
    aggregate_type: str = ""
    taken_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))


class SnapshotStore(abc.ABC):
    """Port – store and retrieve the latest snapshot per aggregate.

    Implementations decide whether older snapshots are retained; :meth:`load`
    must always return the one with the highest version.
    """

    @abc.abstractmethod
    def save(self, snapshot: Snapshot) -> None:
        """Persist *snapshot*."""

    @abc.abstractmethod
    def load(self, aggregate_id: SequentialId) -> Snapshot | None:
        """Return the most recent snapshot for *aggregate_id*, or ``None``."""


class InMemorySnapshotStore(SnapshotStore):
    """In-memory :class:`SnapshotStore` keeping only the newest snapshot."""

    def __init__(self) -> None:
        self._snapshots: dict[SequentialId, Snapshot] = {}
        self._lock = threading.Lock()

    def save(self, snapshot: Snapshot) -> None:
        with self._lock:
            current = self._snapshots.get(snapshot.aggregate_id)
            if current is None or snapshot.version >= current.version:
                self._snapshots[snapshot.aggregate_id] = snapshot

    def load(self, aggregate_id: SequentialId) -> Snapshot | None:
        with self._lock:
            return self._snapshots.get(aggregate_id)

    def all_snapshots(self) -> dict[SequentialId, Snapshot]:
        with self._lock:
            return dict(self._snapshots)


# ---------------------------------------------------------------------------
# Snapshot cadence
# ---------------------------------------------------------------------------


class SnapshotPolicy(Protocol):
    """Decides whether a save that moved an aggregate between versions snapshots it."""

    def should_snapshot(self, previous_version: int, new_version: int) -> bool: ...


class EveryNEventsPolicy:
    """Snapshot when a save crosses a multiple of *n* (``n=0`` never snapshots).

    With ``n=3``, saves taking the version 2 → 4 and 5 → 6 both snapshot,
    while 4 → 5 does not.
    """

    def __init__(self, n: int) -> None:
        if n < 0:
            raise InvalidSettingValueError("snapshot_every", n, "must be >= 0")
        self.n = n

    def should_snapshot(self, previous_version: int, new_version: int) -> bool:
        if self.n == 0:
            return False
        return new_version // self.n > previous_version // self.n

    def __repr__(self) -> str:  # pragma: no cover
        return f"EveryNEventsPolicy(n={self.n})"


class EverySavePolicy:
    """Snapshot after every successful save."""

    def should_snapshot(self, previous_version: int, new_version: int) -> bool:
        return new_version > previous_version


class NeverSnapshotPolicy:
    """Never snapshot; aggregates are always fully replayed."""

    def should_snapshot(self, previous_version: int, new_version: int) -> bool:  # noqa: ARG002
        return False


__all__ = [
    "EveryNEventsPolicy",
    "EverySavePolicy",
    "InMemorySnapshotStore",
    "NeverSnapshotPolicy",
    "Snapshot",
    "SnapshotPolicy",
    "SnapshotStore",
]
