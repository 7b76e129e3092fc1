"""
evsource – Event-sourcing micro-framework.

Import path convention::

    from evsource.kernel.ddd import AggregateRoot, DomainEvent, applies
    from evsource.application.cqrs import Command, CommandHandler, InProcessCommandBus
    from evsource.application.event_sourcing import AggregateRepository, InMemoryEventStore
    from evsource.adapters.sqlalchemy import SQLAlchemyEventStore
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
