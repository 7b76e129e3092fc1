"""SQLAlchemy adapter – SQLAlchemyEventStore."""
from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from evsource.adapters.sqlalchemy.schema import as_utc, events_table
from evsource.application.event_sourcing.store import EventStore, check_batch
from evsource.application.event_sourcing.stored_event import StoredEvent
from evsource.kernel.errors import ConcurrencyConflictError, PersistenceError
from evsource.kernel.types.ids import SequentialId
from evsource.observability.logging import get_logger

logger = get_logger(__name__)


class SQLAlchemyEventStore(EventStore):
    """Append-only relational event store with optimistic concurrency.

    All events live in the ``evsource_events`` table.  The version check and
    the inserts run in one transaction; the ``(aggregate_id, sequence)``
    unique constraint catches writers that pass the check concurrently, and
    that violation is reported as a concurrency conflict as well.

    Call :func:`~evsource.adapters.sqlalchemy.schema.create_schema` (or run a
    migration) before first use.

    Parameters
    ----------
    engine:
        A synchronous :class:`~sqlalchemy.engine.Engine`.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # ------------------------------------------------------------------
    # EventStore interface
    # ------------------------------------------------------------------

    def append(
        self,
        aggregate_id: SequentialId,
        expected_version: int,
        events: Sequence[StoredEvent],
    ) -> None:
        check_batch(aggregate_id, expected_version, events)
        try:
            with self._engine.begin() as conn:
                actual_version = self._last_sequence(conn, aggregate_id)
                if actual_version != expected_version:
                    raise ConcurrencyConflictError(aggregate_id, expected_version, actual_version)
                if events:
                    conn.execute(insert(events_table), [self._to_row(e) for e in events])
        except ConcurrencyConflictError as exc:
            logger.warning(
                "event_store.conflict",
                aggregate_id=str(aggregate_id),
                expected=exc.expected,
                actual=exc.actual,
            )
            raise
        except IntegrityError as exc:
            actual = self.last_sequence(aggregate_id)
            logger.warning(
                "event_store.conflict",
                aggregate_id=str(aggregate_id),
                expected=expected_version,
                actual=actual,
            )
            raise ConcurrencyConflictError(
                aggregate_id, expected_version, actual, cause=exc
            ) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Failed to append events for {aggregate_id}", store="sqlalchemy", cause=exc
            ) from exc

    def read_from(
        self,
        aggregate_id: SequentialId,
        after_version: int = 0,
    ) -> list[StoredEvent]:
        stmt = (
            select(events_table)
            .where(events_table.c.aggregate_id == str(aggregate_id))
            .where(events_table.c.sequence > after_version)
            .order_by(events_table.c.sequence)
        )
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).fetchall()
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Failed to read events for {aggregate_id}", store="sqlalchemy", cause=exc
            ) from exc
        return [self._from_row(row) for row in rows]

    def last_sequence(self, aggregate_id: SequentialId) -> int:
        try:
            with self._engine.connect() as conn:
                return self._last_sequence(conn, aggregate_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Failed to read version of {aggregate_id}", store="sqlalchemy", cause=exc
            ) from exc

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _last_sequence(conn: Connection, aggregate_id: SequentialId) -> int:
        stmt = select(func.max(events_table.c.sequence)).where(
            events_table.c.aggregate_id == str(aggregate_id)
        )
        return conn.execute(stmt).scalar() or 0

    @staticmethod
    def _to_row(event: StoredEvent) -> dict[str, Any]:
        return {
            "aggregate_id": str(event.aggregate_id),
            "sequence": event.sequence,
            "event_type": event.event_type,
            "payload": event.payload,
            "event_id": str(event.event_id),
            "event_date": event.event_date,
            "metadata_json": json.dumps(event.metadata, default=str),
        }

    @staticmethod
    def _from_row(row: Any) -> StoredEvent:
        return StoredEvent(
            aggregate_id=SequentialId.from_str(row.aggregate_id),
            sequence=row.sequence,
            event_type=row.event_type,
            payload=bytes(row.payload),
            event_id=SequentialId.from_str(row.event_id),
            event_date=as_utc(row.event_date),
            metadata=json.loads(row.metadata_json) if row.metadata_json else {},
        )


__all__ = ["SQLAlchemyEventStore"]
