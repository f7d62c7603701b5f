"""Tests for the Supabase key-value storage adapter."""

import asyncio
from dataclasses import dataclass, field

import pytest

from nutriscan.adapters.supabase_storage import SupabaseKeyValueStorage
from nutriscan.services.favorites import FavoritesStore


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    """Minimal `key`/`value` table supporting select and upsert."""

    name: str
    rows: dict[str, dict[str, object]] = field(default_factory=dict)
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_upsert: dict[str, object] | None = None
    last_on_conflict: str | None = None
    reject_writes: bool = False

    def select(self, *_columns: str) -> "FakeTable":
        self._action = "select"
        self.last_filters = []
        return self

    def upsert(self, payload: dict[str, object], on_conflict: str = "") -> "FakeTable":
        self._action = "upsert"
        self.last_upsert = payload
        self.last_on_conflict = on_conflict
        return self

    def eq(self, column: str, value: object) -> "FakeTable":
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        if self._action == "upsert":
            if self.reject_writes or self.last_upsert is None:
                return FakeResponse(data=[])
            key = str(self.last_upsert["key"])
            self.rows[key] = dict(self.last_upsert)
            return FakeResponse(data=[self.rows[key]])
        matches = [
            row
            for row in self.rows.values()
            if all(row.get(column) == value for column, value in self.last_filters)
        ]
        return FakeResponse(data=matches[:1])


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_get_item_missing_key() -> None:
    storage = SupabaseKeyValueStorage(FakeSupabaseClient())

    assert asyncio.run(storage.get_item("favsList")) is None


def test_set_then_get_item() -> None:
    client = FakeSupabaseClient()
    storage = SupabaseKeyValueStorage(client, table="kv")

    asyncio.run(storage.set_item("favsList", '["001"]'))
    value = asyncio.run(storage.get_item("favsList"))

    table = client.tables["kv"]
    assert value == '["001"]'
    assert table.last_on_conflict == "key"
    assert table.last_upsert is not None
    assert "updated_at" in table.last_upsert


def test_non_string_values_read_as_missing() -> None:
    client = FakeSupabaseClient()
    client.table("app_storage").rows["favsList"] = {"key": "favsList", "value": 7}

    assert asyncio.run(SupabaseKeyValueStorage(client).get_item("favsList")) is None


def test_rejected_write_raises() -> None:
    client = FakeSupabaseClient()
    client.table("app_storage").reject_writes = True

    with pytest.raises(RuntimeError):
        asyncio.run(SupabaseKeyValueStorage(client).set_item("favsList", "[]"))


def test_favorites_store_over_supabase() -> None:
    client = FakeSupabaseClient()
    store = FavoritesStore(SupabaseKeyValueStorage(client))

    async def scenario() -> list[str]:
        await asyncio.gather(store.toggle("001"), store.toggle("002"))
        return await store.list_favorites()

    assert asyncio.run(scenario()) == ["001", "002"]
    assert client.tables["app_storage"].rows["favsList"]["value"] == '["001","002"]'
