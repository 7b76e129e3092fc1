"""SQLAlchemy adapter – SQLAlchemySnapshotStore."""
from __future__ import annotations

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from evsource.adapters.sqlalchemy.schema import as_utc, snapshots_table
from evsource.application.event_sourcing.snapshot import Snapshot, SnapshotStore
from evsource.kernel.errors import PersistenceError
from evsource.kernel.types.ids import SequentialId


class SQLAlchemySnapshotStore(SnapshotStore):
    """Snapshot store backed by the ``evsource_snapshots`` table.

    Parameters
    ----------
    engine:
        A synchronous :class:`~sqlalchemy.engine.Engine`.
    keep_history:
        Keep every snapshot row (``True``) or only the newest one per
        aggregate (``False``, default).  Either way a second snapshot at the
        same version replaces the first.
    """

    def __init__(self, engine: Engine, keep_history: bool = False) -> None:
        self._engine = engine
        self._keep_history = keep_history

    def save(self, snapshot: Snapshot) -> None:
        key = str(snapshot.aggregate_id)
        try:
            with self._engine.begin() as conn:
                stale = delete(snapshots_table).where(snapshots_table.c.aggregate_id == key)
                if self._keep_history:
                    stale = stale.where(snapshots_table.c.version == snapshot.version)
                else:
                    stale = stale.where(snapshots_table.c.version <= snapshot.version)
                conn.execute(stale)
                conn.execute(
                    insert(snapshots_table).values(
                        aggregate_id=key,
                        version=snapshot.version,
                        aggregate_type=snapshot.aggregate_type,
                        state=snapshot.state,
                        taken_at=snapshot.taken_at,
                    )
                )
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Failed to save snapshot for {key} at version {snapshot.version}",
                store="sqlalchemy",
                cause=exc,
            ) from exc

    def load(self, aggregate_id: SequentialId) -> Snapshot | None:
        stmt = (
            select(snapshots_table)
            .where(snapshots_table.c.aggregate_id == str(aggregate_id))
            .order_by(snapshots_table.c.version.desc())
            .limit(1)
        )
        try:
            with self._engine.connect() as conn:
                row = conn.execute(stmt).first()
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Failed to load snapshot for {aggregate_id}", store="sqlalchemy", cause=exc
            ) from exc
        if row is None:
            return None
        return Snapshot(
            aggregate_id=SequentialId.from_str(row.aggregate_id),
            version=row.version,
            state=bytes(row.state),
            aggregate_type=row.aggregate_type,
            taken_at=as_utc(row.taken_at),
        )


__all__ = ["SQLAlchemySnapshotStore"]
