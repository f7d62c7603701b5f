"""Supabase-backed key-value storage."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutriscan.services.favorites import KeyValueStorage


@dataclass
class SupabaseKeyValueStorage(KeyValueStorage):
    """Stores string values in a `key`/`value` Supabase table.

    The Supabase client is synchronous, so calls run in a worker thread.
    """

    client: Client
    table: str = "app_storage"

    async def get_item(self, key: str) -> str | None:
        """Return the stored value for `key`, if any."""
        return await asyncio.to_thread(self._select, key)

    async def set_item(self, key: str, value: str) -> None:
        """Upsert `value` under `key`."""
        await asyncio.to_thread(self._upsert, key, value)

    def _select(self, key: str) -> str | None:
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        value = response.data[0].get("value")
        return value if isinstance(value, str) else None

    def _upsert(self, key: str, value: str) -> None:
        response = (
            self.client.table(self.table)
            .upsert(
                {
                    "key": key,
                    "value": value,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="key",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to store value for {key}")
