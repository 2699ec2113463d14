from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from portal.core.repositories.tag_store import TagStateStore
from portal.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    from supabase import Client


class SupabaseTagStateStore(TagStateStore):
    """Supabase implementation of the TagStateStore.

    Assumes a key-value table (default `kv_store`) with a text primary key column
    `key` and a jsonb column `value` holding the whole registry snapshot.
    """

    def __init__(self, client: Client, table_name: str = "kv_store") -> None:
        self._client: Client = client
        self._table_name = table_name

    async def load(self, key: str) -> dict[str, Any] | None:
        resp = await self._run(
            lambda: self._client.table(self._table_name)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        items = resp.data or []
        if not items:
            return None
        value = items[0].get("value")
        return value if isinstance(value, dict) else None

    async def save(self, key: str, state: dict[str, Any]) -> None:
        await self._run(
            lambda: self._client.table(self._table_name)
            .upsert({"key": key, "value": state}, on_conflict="key")
            .execute()
        )
        logger.debug("Upserted tag snapshot %s (%d tags)", key, len(state))

    async def ping(self) -> bool:
        await self._run(
            lambda: self._client.table(self._table_name).select("key").limit(1).execute()
        )
        return True

    async def _run(self, func: Callable[[], Any]) -> Any:
        return await asyncio.to_thread(func)
