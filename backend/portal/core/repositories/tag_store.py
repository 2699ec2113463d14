from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class TagStateStore(ABC):
    """Abstract durable key-value storage for serialized tag registries.

    Each key holds one whole registry snapshot (a JSON object keyed by tag id)
    with read/write-whole-state semantics. Implementations may perform I/O and
    therefore expose async methods.
    """

    @abstractmethod
    async def load(self, key: str) -> dict[str, Any] | None:  # pragma: no cover - interface only
        """Return the stored snapshot for key, or None if nothing was saved."""

    @abstractmethod
    async def save(self, key: str, state: dict[str, Any]) -> None:  # pragma: no cover
        """Replace the snapshot stored under key."""

    @abstractmethod
    async def ping(self) -> bool:  # pragma: no cover
        """Return True if the backing storage is reachable."""
