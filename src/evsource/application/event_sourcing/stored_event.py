"""Application event sourcing – StoredEvent."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any

from evsource.kernel.types.ids import SequentialId


@dataclasses.dataclass(frozen=True)
class StoredEvent:
    """An event as persisted in the event store.

    ``payload`` holds the JSON-encoded payload fields of the original domain
    event; the envelope fields are kept as columns so stores can filter and
    order on them without decoding.
    """

    aggregate_id: SequentialId
    """Aggregate whose stream this event belongs to."""

    sequence: int
    """1-based position of the event in the aggregate's history."""

    event_type: str
    """Registered type name used to find the event class when reading."""

    payload: bytes
    """JSON-encoded payload fields."""

    event_id: SequentialId
    event_date: datetime

    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)
    """Infrastructure metadata (correlation id, command name, ...)."""


__all__ = ["StoredEvent"]
