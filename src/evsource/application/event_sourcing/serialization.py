"""Application event sourcing – EventSerializer.

Converts between :class:`~evsource.kernel.ddd.DomainEvent` instances and
:class:`StoredEvent` envelopes.  Payload encoding goes through pydantic
``TypeAdapter`` so ``Decimal``, ``datetime`` and ``SequentialId`` fields
survive the JSON round trip with their types intact.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from evsource.application.event_sourcing.stored_event import StoredEvent
from evsource.kernel.ddd.dispatch import EventDispatcher
from evsource.kernel.ddd.domain_event import DomainEvent
from evsource.kernel.errors import SerializationError

_ENVELOPE_FIELDS = frozenset({"aggregate_id", "sequence", "event_date", "event_id"})


class EventSerializer:
    """Registry of event classes keyed by their persisted type name."""

    def __init__(self, event_types: Iterable[type[DomainEvent]] = ()) -> None:
        self._types: dict[str, type[DomainEvent]] = {}
        self._names: dict[type[DomainEvent], str] = {}
        self._adapters: dict[type[DomainEvent], TypeAdapter[Any]] = {}
        for event_type in event_types:
            self.register(event_type)

    @classmethod
    def for_dispatchers(cls, *dispatchers: type[EventDispatcher]) -> "EventSerializer":
        """Register every event type handled by the given aggregate/entity classes."""
        serializer = cls()
        for dispatcher in dispatchers:
            for event_type in sorted(dispatcher.known_event_types(), key=lambda t: t.__name__):
                serializer.register(event_type)
        return serializer

    def register(self, event_type: type[DomainEvent], name: str | None = None) -> None:
        """Register *event_type* under *name* (default: the class name)."""
        name = name or event_type.__name__
        existing = self._types.get(name)
        if existing is not None and existing is not event_type:
            raise SerializationError(
                f"Event type name {name!r} is already bound to {existing.__qualname__}",
                payload_type=name,
            )
        self._types[name] = event_type
        self._names[event_type] = name
        self._adapters[event_type] = TypeAdapter(event_type)

    def is_registered(self, event_type: type[DomainEvent]) -> bool:
        return event_type in self._names

    def type_name(self, event_type: type[DomainEvent]) -> str:
        try:
            return self._names[event_type]
        except KeyError:
            raise SerializationError(
                f"Event type {event_type.__qualname__} is not registered",
                payload_type=event_type.__name__,
            ) from None

    def to_stored(self, event: DomainEvent, metadata: dict[str, Any] | None = None) -> StoredEvent:
        """Build the envelope for an event that has already been applied."""
        if event.aggregate_id is None or event.event_date is None or not event.is_applied:
            raise SerializationError(
                f"{event.event_type} must be applied to an aggregate before it is stored",
                payload_type=event.event_type,
            )
        name = self.type_name(type(event))
        data = self._adapters[type(event)].dump_python(event, mode="json")
        payload = {k: v for k, v in data.items() if k not in _ENVELOPE_FIELDS}
        return StoredEvent(
            aggregate_id=event.aggregate_id,
            sequence=event.sequence,
            event_type=name,
            payload=json.dumps(payload, sort_keys=True).encode(),
            event_id=event.event_id,
            event_date=event.event_date,
            metadata=metadata or {},
        )

    def from_stored(self, stored: StoredEvent) -> DomainEvent:
        """Rebuild the domain event, keeping its original sequence and date."""
        event_type = self._types.get(stored.event_type)
        if event_type is None:
            raise SerializationError(
                f"Unknown event type {stored.event_type!r}",
                payload_type=stored.event_type,
            )
        try:
            data = json.loads(stored.payload)
            data.update(
                aggregate_id=stored.aggregate_id,
                sequence=stored.sequence,
                event_date=stored.event_date,
                event_id=stored.event_id,
            )
            return self._adapters[event_type].validate_python(data)
        except (ValueError, PydanticValidationError) as exc:
            raise SerializationError(
                f"Cannot decode {stored.event_type} #{stored.sequence}: {exc}",
                payload_type=stored.event_type,
                cause=exc,
            ) from exc


__all__ = ["EventSerializer"]
