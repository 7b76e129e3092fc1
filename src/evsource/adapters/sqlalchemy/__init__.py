"""SQLAlchemy adapter – relational event and snapshot stores."""
from evsource.adapters.sqlalchemy.event_store import SQLAlchemyEventStore
from evsource.adapters.sqlalchemy.schema import create_schema, events_table, metadata, snapshots_table
from evsource.adapters.sqlalchemy.snapshot_store import SQLAlchemySnapshotStore

__all__ = [
    "SQLAlchemyEventStore",
    "SQLAlchemySnapshotStore",
    "create_schema",
    "events_table",
    "metadata",
    "snapshots_table",
]
