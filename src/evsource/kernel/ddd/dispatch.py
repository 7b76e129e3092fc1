"""Per-class event dispatch tables.

Handler methods are marked with :func:`applies`; the table mapping event
types to method names is collected once, when the class is created.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, TypeVar

from evsource.kernel.ddd.domain_event import DomainEvent
from evsource.kernel.errors.domain import ApplyNotSupportedError

F = TypeVar("F", bound=Callable[..., Any])

_APPLIES_ATTR = "__evsource_applies__"


def applies(*event_types: type[DomainEvent]) -> Callable[[F], F]:
    """Mark a method as the state-mutation logic for *event_types*.

    Usage::

        class BankAccount(AggregateRoot):
            @applies(AccountDebited)
            def _on_debited(self, event: AccountDebited) -> None:
                self.balance -= event.amount
    """
    if not event_types:
        raise TypeError("applies() needs at least one event type")

    def decorator(func: F) -> F:
        setattr(func, _APPLIES_ATTR, event_types)
        return func

    return decorator


class EventDispatcher:
    """Mixin holding a class-level ``event type -> method name`` table."""

    _appliers: ClassVar[dict[type[DomainEvent], str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        table: dict[type[DomainEvent], str] = {}
        # base classes first so subclasses can re-bind an event type
        for klass in reversed(cls.__mro__):
            for name, member in vars(klass).items():
                for event_type in getattr(member, _APPLIES_ATTR, ()):
                    table[event_type] = name
        cls._appliers = table

    @classmethod
    def handled_event_types(cls) -> frozenset[type[DomainEvent]]:
        return frozenset(cls._appliers)

    @classmethod
    def known_event_types(cls) -> frozenset[type[DomainEvent]]:
        """Event types this class (and anything it routes to) can receive."""
        return cls.handled_event_types()

    def _dispatch(self, event: DomainEvent) -> None:
        """Invoke the handler for *event*, matching the closest class in its MRO."""
        for klass in type(event).__mro__:
            name = self._appliers.get(klass)
            if name is not None:
                getattr(self, name)(event)
                return
        raise ApplyNotSupportedError(type(self).__name__, event.event_type)


__all__ = ["EventDispatcher", "applies"]
