from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from portal.core.models.tag import TagEntry, normalize_tag
from portal.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TagRegistry:
    """In-memory catalogue of hashtags keyed by normalized tag id.

    One instance per user session. Entries are created on first registration and
    afterwards only updated (count increment, timestamp refresh). Persistence is
    handled by the caller through ``to_snapshot``/``from_snapshot``.
    """

    def __init__(
        self,
        entries: Mapping[str, TagEntry] | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._tags: dict[str, TagEntry] = dict(entries or {})
        self._clock = clock
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._tags)

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and self.get_tag(tag) is not None

    def register_tag(self, raw_tag: str) -> TagEntry | None:
        """Record one occurrence of a tag; returns the updated entry.

        Every call increments the count. Tags that normalize to nothing are
        rejected and leave the registry untouched.
        """
        parts = normalize_tag(raw_tag)
        if parts is None:
            logger.debug("Rejected empty or malformed tag %r", raw_tag)
            return None

        with self._lock:
            now = self._clock()
            existing = self._tags.get(parts.id)
            if existing is not None:
                entry = existing.model_copy(update={"count": existing.count + 1, "last_used": now})
            else:
                entry = TagEntry(
                    id=parts.id,
                    namespace=parts.namespace,
                    value=parts.value,
                    count=1,
                    last_used=now,
                )
            self._tags[parts.id] = entry
        return entry

    def register_tags(self, raw_tags: Iterable[str]) -> list[TagEntry]:
        """Register each tag in order, skipping rejected ones."""
        registered: list[TagEntry] = []
        for raw in raw_tags:
            entry = self.register_tag(raw)
            if entry is not None:
                registered.append(entry)
        return registered

    def get_tag(self, tag: str) -> TagEntry | None:
        parts = normalize_tag(tag)
        if parts is None:
            return None
        with self._lock:
            return self._tags.get(parts.id)

    def merge(self, other: TagRegistry) -> None:
        """Fold another registry's occurrences into this one.

        Counts add up and the most recent `last_used` wins.
        """
        incoming = other.get_all_tags()
        with self._lock:
            for entry in incoming:
                existing = self._tags.get(entry.id)
                if existing is None:
                    self._tags[entry.id] = entry
                    continue
                self._tags[entry.id] = existing.model_copy(
                    update={
                        "count": existing.count + entry.count,
                        "last_used": max(existing.last_used, entry.last_used),
                    }
                )

    def get_all_tags(self) -> list[TagEntry]:
        """All entries, most used first."""
        with self._lock:
            entries = list(self._tags.values())
        return sorted(entries, key=lambda t: t.count, reverse=True)

    def get_tags_by_namespace(self, namespace: str) -> list[TagEntry]:
        wanted = (namespace or "").strip().lower()
        return [t for t in self.get_all_tags() if t.namespace == wanted]

    def get_popular_tags(self, limit: int = 10) -> list[TagEntry]:
        if limit <= 0:
            return []
        return self.get_all_tags()[:limit]

    def to_snapshot(self) -> dict[str, dict[str, Any]]:
        """JSON-ready mapping of tag id to entry, for whole-state persistence."""
        with self._lock:
            return {
                tag_id: entry.model_dump(mode="json", by_alias=True, exclude={"display"})
                for tag_id, entry in self._tags.items()
            }

    @classmethod
    def from_snapshot(
        cls,
        data: Mapping[str, Any] | None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> TagRegistry:
        """Rebuild a registry from a stored snapshot, skipping malformed rows."""
        entries: dict[str, TagEntry] = {}
        for tag_id, row in (data or {}).items():
            if not isinstance(row, dict):
                logger.warning("Skipping malformed tag row %r", tag_id)
                continue
            try:
                entry = TagEntry.model_validate({k: v for k, v in row.items() if k != "display"})
            except ValidationError as err:
                logger.warning("Skipping invalid tag row %r (%d errors)", tag_id, err.error_count())
                continue
            entries[entry.id] = entry
        return cls(entries, clock=clock)
