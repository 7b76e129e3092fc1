"""AggregateRoot – event application and replay engine."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, ClassVar, TypeVar

from evsource.kernel.ddd.dispatch import EventDispatcher
from evsource.kernel.ddd.domain_event import DomainEvent, EntityEvent
from evsource.kernel.ddd.entity import Entity
from evsource.kernel.errors.domain import (
    ApplyNotSupportedError,
    DomainError,
    SnapshotNotSupportedError,
    ValidationError,
)
from evsource.kernel.time.clock import Clock, SystemClock
from evsource.kernel.types.ids import SequentialId
from evsource.observability.logging import get_logger

E = TypeVar("E", bound=DomainEvent)

logger = get_logger(__name__)


class AggregateRoot(EventDispatcher):
    """Consistency boundary whose state is the replay of its event history.

    Subclasses declare state-mutation methods with
    :func:`~evsource.kernel.ddd.dispatch.applies` and expose domain
    operations that validate input and then call :meth:`apply_event`.

    Example::

        class BankAccount(AggregateRoot):
            def __init__(self, id: SequentialId | None = None) -> None:
                super().__init__(id)
                self.balance = Decimal(0)

            def debit(self, amount: Decimal) -> None:
                self.apply_event(AccountDebited(amount=amount))

            @applies(AccountDebited)
            def _on_debited(self, event: AccountDebited) -> None:
                self.balance -= event.amount
    """

    entity_types: ClassVar[tuple[type[Entity], ...]] = ()
    """Entity classes owned by this aggregate type; their events are known too."""

    def __init__(
        self,
        id: SequentialId | None = None,  # noqa: A002
        *,
        clock: Clock | None = None,
    ) -> None:
        self._id = id if id is not None else SequentialId.generate()
        self._version = 0
        self._uncommitted: list[DomainEvent] = []
        self._entities: dict[SequentialId, Entity] = {}
        self._clock: Clock = clock or SystemClock()

    @classmethod
    def known_event_types(cls) -> frozenset[type[DomainEvent]]:
        types = set(cls.handled_event_types())
        for entity_type in cls.entity_types:
            types.update(entity_type.handled_event_types())
        return frozenset(types)

    # ------------------------------------------------------------------
    # Identity / bookkeeping
    # ------------------------------------------------------------------

    @property
    def id(self) -> SequentialId:
        return self._id

    @property
    def version(self) -> int:
        """Number of events ever applied (replayed + new)."""
        return self._version

    @property
    def loaded_version(self) -> int:
        """Version before any uncommitted events were applied."""
        return self._version - len(self._uncommitted)

    @property
    def uncommitted_events(self) -> tuple[DomainEvent, ...]:
        return tuple(self._uncommitted)

    @property
    def associated_entities(self) -> Mapping[SequentialId, Entity]:
        return MappingProxyType(self._entities)

    def mark_committed(self) -> None:
        """Forget uncommitted events once the store has accepted them."""
        self._uncommitted.clear()

    # ------------------------------------------------------------------
    # Event application
    # ------------------------------------------------------------------

    def apply_event(self, event: E, is_new: bool = True) -> E:
        """Apply *event* and return the event as applied.

        New events are stamped with ``sequence == version``, the clock's
        current time and this aggregate's id (as a copy, events are
        immutable) and buffered for persistence.  Historical events
        (``is_new=False``) are applied as-is.

        A new event already bound to another aggregate raises
        :class:`~evsource.kernel.errors.ValidationError`.  If a state-mutation
        handler raises, the version is restored and the error propagates.
        """
        if is_new and event.aggregate_id not in (None, self._id):
            raise ValidationError(
                f"{event.event_type} belongs to aggregate {event.aggregate_id}, not {self._id}"
            )

        self._version += 1

        if is_new:
            event = dataclasses.replace(
                event,
                aggregate_id=self._id,
                sequence=self._version,
                event_date=self._clock.now(),
            )

        try:
            if isinstance(event, EntityEvent):
                self._apply_to_entity(event)
            else:
                self._dispatch(event)
        except ApplyNotSupportedError as exc:
            logger.debug(
                "event.apply_not_supported",
                target=exc.target,
                event_type=exc.event_type,
                aggregate_id=str(self._id),
            )
        except Exception:
            self._version -= 1
            raise

        if is_new:
            self._uncommitted.append(event)
        return event

    def replay_events(self, events: Iterable[DomainEvent] | None) -> None:
        """Rebuild state from persisted history; queues nothing."""
        if events is None:
            return
        for event in events:
            self.apply_event(event, is_new=False)

    def associate(self, entity: Entity) -> None:
        """Register *entity* as owned by this aggregate (idempotent)."""
        self._entities.setdefault(entity.id, entity)

    def _apply_to_entity(self, event: EntityEvent) -> None:
        entity = self._entities.get(event.entity_id)
        if entity is None:
            logger.debug(
                "event.entity_not_associated",
                event_type=event.event_type,
                entity_id=str(event.entity_id),
                aggregate_id=str(self._id),
            )
            return
        entity._dispatch(event)  # noqa: SLF001

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @classmethod
    def supports_snapshots(cls) -> bool:
        return (
            cls.snapshot_state is not AggregateRoot.snapshot_state
            and cls.restore_state is not AggregateRoot.restore_state
        )

    def snapshot_state(self) -> dict[str, Any]:
        """Return JSON-compatible state (entities included). Override to enable snapshots."""
        raise SnapshotNotSupportedError(type(self).__name__)

    def restore_state(self, state: dict[str, Any]) -> None:
        """Inverse of :meth:`snapshot_state`, called on a version-0 instance."""
        raise SnapshotNotSupportedError(type(self).__name__)

    def restore_snapshot(self, version: int, state: dict[str, Any]) -> None:
        """Load *state* captured at *version* into this fresh instance."""
        if self._version or self._uncommitted:
            raise DomainError(
                f"{type(self).__name__} already has applied events; cannot restore a snapshot"
            )
        self.restore_state(state)
        self._version = version

    def __repr__(self) -> str:  # pragma: no cover
        return f"{type(self).__name__}(id={self._id!r}, version={self._version})"


__all__ = ["AggregateRoot"]
