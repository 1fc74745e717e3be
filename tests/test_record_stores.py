"""Tests for record store adapters."""

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from macro_manager.adapters.json_file_store import JsonFileRecordStore
from macro_manager.adapters.supabase_record_store import TABLE, SupabaseRecordStore
from macro_manager.domain.errors import PersistenceError
from macro_manager.domain.records import FoodDraft
from macro_manager.services.records import ENTRIES, RecordRepository
from tests.conftest import food, make_tracker


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_conflict: str | None = None
    error: Exception | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(self, payload: object, on_conflict: str = "") -> "FakeTable":
        self._action = "upsert"
        self.last_payload = payload
        self.last_conflict = on_conflict
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        if self.error is not None:
            raise self.error
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_json_file_store_roundtrip(tmp_path: Path) -> None:
    store = JsonFileRecordStore(tmp_path / "data")

    assert store.load(ENTRIES) is None

    store.save(ENTRIES, "[]")
    store.save(ENTRIES, '[{"id": "a"}]')

    assert store.load(ENTRIES) == '[{"id": "a"}]'
    assert sorted(path.name for path in (tmp_path / "data").iterdir()) == [
        "entries.json"
    ]


def test_json_file_store_reports_write_failures(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    store = JsonFileRecordStore(blocker)

    with pytest.raises(PersistenceError):
        store.save(ENTRIES, "[]")


def test_tracker_state_survives_restart(tmp_path: Path) -> None:
    store = JsonFileRecordStore(tmp_path)
    tracker = make_tracker(store)
    saved = tracker.save_food(
        FoodDraft(name="Apple", nutrients=food("x", "2024-03-10").nutrients)
    )

    reloaded = make_tracker(JsonFileRecordStore(tmp_path))
    reloaded.load()

    assert reloaded.entries == [saved]


def test_supabase_store_load() -> None:
    client = FakeSupabaseClient()
    table = client.table(TABLE)
    table.queue("select", [{"payload": '[{"id": "a"}]'}])

    store = SupabaseRecordStore(client)

    assert store.load(ENTRIES) == '[{"id": "a"}]'
    assert table.last_filters == [("name", ENTRIES)]
    assert store.load(ENTRIES) is None


def test_supabase_store_save_upserts_by_name() -> None:
    client = FakeSupabaseClient()
    store = SupabaseRecordStore(client)

    RecordRepository(store).save_entries([food("a", "2024-03-10")])

    table = client.table(TABLE)
    assert isinstance(table.last_payload, dict)
    assert table.last_payload["name"] == ENTRIES
    assert '"id": "a"' in str(table.last_payload["payload"])
    assert table.last_conflict == "name"


def test_supabase_store_wraps_errors() -> None:
    client = FakeSupabaseClient()
    client.table(TABLE).error = RuntimeError("connection refused")
    store = SupabaseRecordStore(client)

    with pytest.raises(PersistenceError):
        store.load(ENTRIES)
    with pytest.raises(PersistenceError):
        store.save(ENTRIES, "[]")
