"""Supabase-backed key-value store."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from logwell.services.storage import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Stores documents as rows of a ``key``/``value`` table."""

    client: Client
    table: str = "kv_store"

    async def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str) -> None:
        """Upsert the value for a key."""
        await asyncio.to_thread(self._set, key, value)

    async def remove(self, key: str) -> None:
        """Delete the row for a key."""
        await asyncio.to_thread(self._remove, [key])

    async def multi_remove(self, keys: list[str]) -> None:
        """Delete the rows for several keys."""
        if not keys:
            return
        await asyncio.to_thread(self._remove, keys)

    def _get(self, key: str) -> str | None:
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    def _set(self, key: str, value: str) -> None:
        response = (
            self.client.table(self.table)
            .upsert(
                {
                    "key": key,
                    "value": value,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to store {key}")

    def _remove(self, keys: list[str]) -> None:
        self.client.table(self.table).delete().in_("key", keys).execute()
