"""DDD building blocks – public re-export surface."""

from evsource.kernel.ddd.aggregate import AggregateRoot
from evsource.kernel.ddd.dispatch import EventDispatcher, applies
from evsource.kernel.ddd.domain_event import DomainEvent, EntityEvent
from evsource.kernel.ddd.entity import Entity

__all__ = [
    "AggregateRoot",
    "DomainEvent",
    "Entity",
    "EntityEvent",
    "EventDispatcher",
    "applies",
]
