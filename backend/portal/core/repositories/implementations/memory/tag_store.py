from __future__ import annotations

import copy
from typing import Any

from portal.core.repositories.tag_store import TagStateStore


class InMemoryTagStateStore(TagStateStore):
    """Process-local store; snapshots live only as long as the process."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None) -> None:
        self._data: dict[str, dict[str, Any]] = copy.deepcopy(initial or {})

    async def load(self, key: str) -> dict[str, Any] | None:
        state = self._data.get(key)
        return copy.deepcopy(state) if state is not None else None

    async def save(self, key: str, state: dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(state)

    async def ping(self) -> bool:
        return True
