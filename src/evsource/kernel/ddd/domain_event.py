"""Domain events and entity-scoped domain events."""

from __future__ import annotations

import dataclasses
from datetime import datetime

from evsource.kernel.errors.domain import ValidationError
from evsource.kernel.types.ids import SequentialId


@dataclasses.dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for domain events.

    ``sequence`` and ``event_date`` are assigned by the aggregate the first
    time the event is applied; callers leave them at their defaults.
    Subclasses add their own payload fields.

    Example::

        @dataclasses.dataclass(frozen=True)
        class AccountDebited(DomainEvent):
            amount: Decimal
    """

    aggregate_id: SequentialId | None = None
    sequence: int = 0
    event_date: datetime | None = None
    event_id: SequentialId = dataclasses.field(default_factory=SequentialId.generate)

    def __post_init__(self) -> None:
        if self.sequence < 0:
            raise ValidationError(f"{self.event_type}.sequence must be >= 0, got {self.sequence}")

    @property
    def event_type(self) -> str:
        return type(self).__name__

    @property
    def is_applied(self) -> bool:
        """True once an aggregate has stamped a sequence on this event."""
        return self.sequence >= 1


@dataclasses.dataclass(frozen=True, kw_only=True)
class EntityEvent(DomainEvent):
    """Domain event that targets one entity owned by the aggregate."""

    entity_id: SequentialId


__all__ = ["DomainEvent", "EntityEvent"]
