"""Application – Host and HostConfiguration.

Wiring is decided once at process start with plain factory functions; there
is no container.  Typical bootstrap::

    config = (
        HostConfiguration(settings=EnvSettingsLoader().load(EventSourcingSettings))
        .use_event_store(lambda: SQLAlchemyEventStore(engine))
        .use_snapshot_store(lambda: SQLAlchemySnapshotStore(engine))
    )
    host = Host(config)
    accounts = host.repository(BankAccount)
    host.command_bus.register(DebitAccount, DebitAccountHandler(accounts))
    host.command_bus.send(DebitAccount(aggregate_id=account_id, amount=Decimal("50")))
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, TypeVar

from evsource.application.cqrs.commands import CommandBus, InProcessCommandBus
from evsource.application.event_sourcing.repository import AggregateRepository
from evsource.application.event_sourcing.serialization import EventSerializer
from evsource.application.event_sourcing.snapshot import (
    EveryNEventsPolicy,
    SnapshotPolicy,
    SnapshotStore,
)
from evsource.application.event_sourcing.store import EventStore, InMemoryEventStore
from evsource.config.settings import EventSourcingSettings
from evsource.kernel.ddd.aggregate import AggregateRoot
from evsource.kernel.types.ids import SequentialId
from evsource.observability.logging import JsonLoggerFactory, get_logger
from evsource.resilience.retry import ConflictRetryPolicy

T = TypeVar("T", bound=AggregateRoot)

logger = get_logger(__name__)


@dataclasses.dataclass
class HostConfiguration:
    """Factories for the process-wide collaborators.

    The event store defaults to an in-memory store; snapshots are disabled
    until a snapshot store factory is configured.
    """

    settings: EventSourcingSettings = dataclasses.field(default_factory=EventSourcingSettings)
    event_store_factory: Callable[[], EventStore] = InMemoryEventStore
    snapshot_store_factory: Callable[[], SnapshotStore] | None = None
    snapshot_policy: SnapshotPolicy | None = None
    command_bus_factory: Callable[[], CommandBus] = InProcessCommandBus
    configure_logging: bool = False

    def use_event_store(self, factory: Callable[[], EventStore]) -> "HostConfiguration":
        self.event_store_factory = factory
        return self

    def use_snapshot_store(
        self,
        factory: Callable[[], SnapshotStore],
        policy: SnapshotPolicy | None = None,
    ) -> "HostConfiguration":
        self.snapshot_store_factory = factory
        if policy is not None:
            self.snapshot_policy = policy
        return self

    def effective_snapshot_policy(self) -> SnapshotPolicy:
        if self.snapshot_policy is not None:
            return self.snapshot_policy
        return EveryNEventsPolicy(self.settings.snapshot_every)


class Host:
    """Holds the stores and command bus built from a :class:`HostConfiguration`."""

    def __init__(self, configuration: HostConfiguration | None = None) -> None:
        self._config = configuration or HostConfiguration()
        settings = self._config.settings
        if self._config.configure_logging:
            JsonLoggerFactory.configure(settings.log_level, json=settings.log_json)

        self.event_store: EventStore = self._config.event_store_factory()
        self.snapshot_store: SnapshotStore | None = (
            self._config.snapshot_store_factory()
            if self._config.snapshot_store_factory is not None
            else None
        )
        self.snapshot_policy: SnapshotPolicy = self._config.effective_snapshot_policy()
        self.command_bus: CommandBus = self._config.command_bus_factory()
        self.retry_policy = ConflictRetryPolicy(max_attempts=settings.conflict_retry_attempts)
        logger.info(
            "host.started",
            event_store=type(self.event_store).__name__,
            snapshot_store=type(self.snapshot_store).__name__ if self.snapshot_store else None,
            snapshot_policy=repr(self.snapshot_policy),
        )

    @property
    def settings(self) -> EventSourcingSettings:
        return self._config.settings

    def repository(
        self,
        aggregate_factory: Callable[[SequentialId], T],
        serializer: EventSerializer | None = None,
        metadata_factory: Callable[[Any], dict[str, Any]] | None = None,
    ) -> AggregateRepository[T]:
        """Build a repository sharing this host's stores and snapshot policy."""
        return AggregateRepository(
            aggregate_factory,
            event_store=self.event_store,
            snapshot_store=self.snapshot_store,
            snapshot_policy=self.snapshot_policy,
            serializer=serializer,
            metadata_factory=metadata_factory,
        )


__all__ = ["Host", "HostConfiguration"]
