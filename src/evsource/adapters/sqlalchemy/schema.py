"""SQLAlchemy adapter – table definitions for events and snapshots."""
from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    LargeBinary,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

events_table = Table(
    "evsource_events",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("aggregate_id", String(36), nullable=False, index=True),
    Column("sequence", Integer, nullable=False),
    Column("event_type", String(256), nullable=False),
    Column("payload", LargeBinary, nullable=False),
    Column("event_id", String(36), nullable=False, unique=True),
    Column("event_date", DateTime(timezone=True), nullable=False),
    Column("metadata_json", Text, nullable=False, default="{}"),
    # the database itself refuses two events at the same position
    UniqueConstraint("aggregate_id", "sequence", name="uq_evsource_events_aggregate_sequence"),
)

snapshots_table = Table(
    "evsource_snapshots",
    metadata,
    Column("aggregate_id", String(36), nullable=False),
    Column("version", Integer, nullable=False),
    Column("aggregate_type", String(256), nullable=False, default=""),
    Column("state", LargeBinary, nullable=False),
    Column("taken_at", DateTime(timezone=True), nullable=False),
    PrimaryKeyConstraint("aggregate_id", "version", name="pk_evsource_snapshots"),
)


def create_schema(engine: Engine) -> None:
    """Create both tables if they do not exist (use migrations in production)."""
    metadata.create_all(engine)


def as_utc(value: datetime) -> datetime:
    """SQLite drops tz info on the way back; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


__all__ = ["as_utc", "create_schema", "events_table", "metadata", "snapshots_table"]
