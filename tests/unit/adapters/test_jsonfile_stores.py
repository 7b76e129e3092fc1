"""Unit tests for the JSON file event and snapshot stores."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

import pytest

from evsource.adapters.jsonfile import JsonFileEventStore, JsonFileSnapshotStore
from evsource.application.event_sourcing import AggregateRepository, EverySavePolicy, Snapshot, StoredEvent
from evsource.kernel.errors import ConcurrencyConflictError, PersistenceError
from evsource.kernel.types import SequentialId
from evsource.testing.bank import BankAccount


def _event(aggregate_id: SequentialId, sequence: int) -> StoredEvent:
    return StoredEvent(
        aggregate_id=aggregate_id,
        sequence=sequence,
        event_type="AccountCredited",
        payload=b'{"amount": "1"}',
        event_id=SequentialId.generate(),
        event_date=datetime(2024, 5, 1, 12, sequence, tzinfo=UTC),
        metadata={"n": sequence},
    )


class TestJsonFileEventStore:
    def test_round_trip_survives_new_instance(self, tmp_path: Path) -> None:
        path = tmp_path / "events.json"
        agg = SequentialId.generate()
        written = [_event(agg, 1), _event(agg, 2)]
        JsonFileEventStore(path).append(agg, 0, written)

        reopened = JsonFileEventStore(path)
        assert reopened.read_from(agg) == written
        assert reopened.last_sequence(agg) == 2
        assert reopened.path == str(path)

    def test_conflict(self, tmp_path: Path) -> None:
        store = JsonFileEventStore(tmp_path / "events.json")
        agg = SequentialId.generate()
        store.append(agg, 0, [_event(agg, 1)])
        with pytest.raises(ConcurrencyConflictError):
            store.append(agg, 0, [_event(agg, 1)])
        assert store.last_sequence(agg) == 1

    def test_missing_file_reads_empty(self, tmp_path: Path) -> None:
        store = JsonFileEventStore(tmp_path / "nested" / "events.json")
        assert store.read_from(SequentialId.generate()) == []

    def test_corrupt_file_is_persistence_error(self, tmp_path: Path) -> None:
        path = tmp_path / "events.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonFileEventStore(path).last_sequence(SequentialId.generate())

    def test_no_temp_files_left_behind(self, tmp_path: Path) -> None:
        store = JsonFileEventStore(tmp_path / "events.json")
        agg = SequentialId.generate()
        store.append(agg, 0, [_event(agg, 1)])
        assert [p.name for p in tmp_path.iterdir()] == ["events.json"]


class TestJsonFileSnapshotStore:
    def test_keeps_newest(self, tmp_path: Path) -> None:
        store = JsonFileSnapshotStore(tmp_path / "snapshots.json")
        agg = SequentialId.generate()
        store.save(Snapshot(agg, 6, b'{"v": 6}', aggregate_type="BankAccount"))
        store.save(Snapshot(agg, 3, b'{"v": 3}'))

        loaded = JsonFileSnapshotStore(tmp_path / "snapshots.json").load(agg)
        assert loaded is not None
        assert loaded.version == 6
        assert loaded.state == b'{"v": 6}'
        assert loaded.aggregate_type == "BankAccount"

    def test_missing(self, tmp_path: Path) -> None:
        assert JsonFileSnapshotStore(tmp_path / "s.json").load(SequentialId.generate()) is None


def test_repository_over_json_files(tmp_path: Path) -> None:
    repository = AggregateRepository(
        BankAccount,
        event_store=JsonFileEventStore(tmp_path / "events.json"),
        snapshot_store=JsonFileSnapshotStore(tmp_path / "snapshots.json"),
        snapshot_policy=EverySavePolicy(),
    )
    account = BankAccount()
    account.open(Decimal("10"))
    card = account.issue_card(Decimal("5"))
    repository.save(account)
    account.credit(Decimal("2.50"))
    repository.save(account)

    reloaded = repository.load(account.id)
    assert reloaded.balance == Decimal("12.50")
    assert reloaded.card(card.id).daily_limit == Decimal("5")
    assert reloaded.version == 3
