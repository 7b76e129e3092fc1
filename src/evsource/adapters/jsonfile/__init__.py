"""JSON file adapter – file-backed event and snapshot stores."""
from evsource.adapters.jsonfile.event_store import JsonFileEventStore
from evsource.adapters.jsonfile.snapshot_store import JsonFileSnapshotStore

__all__ = ["JsonFileEventStore", "JsonFileSnapshotStore"]
