from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from portal.core.services.tag_registry import TagRegistry
from portal.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from portal.core.models.tag import TagEntry
    from portal.core.repositories.tag_store import TagStateStore


logger = get_logger(__name__)


class TagRegistryService:
    """Owns the lifecycle of per-session tag registries.

    A registry is restored from the store on first use for a session, saved
    after each mutation, and flushed when the application shuts down.

    When a restore fails the session runs on an in-memory registry that is never
    written back, so the stored snapshot cannot be overwritten by a partial
    state. Each later access retries the restore; once it succeeds the
    in-memory occurrences are merged into the restored registry and saved.
    """

    def __init__(self, store: TagStateStore, *, namespace_key: str = "cafe-tags") -> None:
        self._store = store
        self._namespace_key = namespace_key
        self._registries: dict[str, TagRegistry] = {}
        self._unsynced: set[str] = set()
        self._locks: dict[str, asyncio.Lock] = {}

    def storage_key(self, session_id: str) -> str:
        return f"{self._namespace_key}:{session_id}"

    def is_synced(self, session_id: str) -> bool:
        """False while the session's registry could not be restored from the store."""
        return session_id not in self._unsynced

    async def get_registry(self, session_id: str) -> TagRegistry:
        """Return the session's registry, restoring it from the store if needed."""
        registry = self._registries.get(session_id)
        if registry is not None and session_id not in self._unsynced:
            return registry

        lock = self._locks.setdefault(session_id, asyncio.Lock())
        async with lock:
            registry = self._registries.get(session_id)
            if registry is not None and session_id not in self._unsynced:
                return registry

            try:
                snapshot = await self._store.load(self.storage_key(session_id))
            except Exception as err:
                logger.error("Failed to load tag registry for session %s: %s", session_id, err)
                if registry is None:
                    registry = TagRegistry()
                    self._registries[session_id] = registry
                    self._unsynced.add(session_id)
                return registry

            restored = TagRegistry.from_snapshot(snapshot)
            if registry is not None:
                restored.merge(registry)
            self._registries[session_id] = restored
            if session_id in self._unsynced:
                self._unsynced.discard(session_id)
                logger.info("Tag registry for session %s recovered from store", session_id)
                await self.save(session_id)
            logger.info("Tag registry ready for session %s (%d tags)", session_id, len(restored))
        return restored

    async def register_tags(self, session_id: str, raw_tags: Iterable[str]) -> list[TagEntry]:
        """Register tags in order and persist the session's registry if anything changed."""
        registry = await self.get_registry(session_id)
        registered = registry.register_tags(raw_tags)
        if registered:
            await self.save(session_id)
        return registered

    async def save(self, session_id: str) -> bool:
        registry = self._registries.get(session_id)
        if registry is None:
            return False
        if session_id in self._unsynced:
            logger.warning("Not saving tag registry for session %s until it is restored", session_id)
            return False
        try:
            await self._store.save(self.storage_key(session_id), registry.to_snapshot())
        except Exception as err:  # pragma: no cover - storage/network errors
            logger.error("Failed to save tag registry for session %s: %s", session_id, err)
            return False
        return True

    async def flush_all(self) -> None:
        """Persist every loaded registry; used at application shutdown."""
        for session_id in list(self._registries):
            await self.save(session_id)

    async def close_session(self, session_id: str) -> None:
        """Persist and drop a session's registry."""
        if session_id in self._unsynced:
            logger.warning("Dropping unsynced tag registry for session %s", session_id)
        await self.save(session_id)
        self._registries.pop(session_id, None)
        self._unsynced.discard(session_id)
        self._locks.pop(session_id, None)

    async def is_store_available(self) -> bool:
        try:
            return await self._store.ping()
        except Exception as err:  # pragma: no cover - storage/network errors
            logger.warning("Tag store ping failed: %s", err)
            return False
