"""Entity – child object inside an aggregate's consistency boundary."""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING

from evsource.kernel.ddd.dispatch import EventDispatcher
from evsource.kernel.ddd.domain_event import EntityEvent
from evsource.kernel.errors.domain import DomainError
from evsource.kernel.types.ids import SequentialId

if TYPE_CHECKING:
    from evsource.kernel.ddd.aggregate import AggregateRoot


class Entity(EventDispatcher):
    """Entity owned by an aggregate; equality is identity-based (by ``id``).

    The entity associates itself with *owner* on construction.  The owner is
    held through a weak reference: it routes events, it does not keep the
    aggregate alive.
    """

    def __init__(
        self,
        owner: "AggregateRoot",
        id: SequentialId | None = None,  # noqa: A002
    ) -> None:
        self._id = id if id is not None else SequentialId.generate()
        self._owner = weakref.ref(owner)
        owner.associate(self)

    @property
    def id(self) -> SequentialId:
        return self._id

    @property
    def owner(self) -> "AggregateRoot":
        owner = self._owner()
        if owner is None:
            raise DomainError(f"{type(self).__name__} {self._id} outlived its aggregate")
        return owner

    def _apply(self, event: EntityEvent) -> EntityEvent:
        """Record a new entity event through the owning aggregate."""
        return self.owner.apply_event(event)  # type: ignore[return-value]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:  # pragma: no cover
        return f"{type(self).__name__}(id={self._id!r})"


__all__ = ["Entity"]
