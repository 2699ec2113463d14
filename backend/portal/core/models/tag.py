from __future__ import annotations

from datetime import UTC, datetime
from typing import NamedTuple

from pydantic import Field, computed_field, field_validator

from .base import AppBaseModel

DEFAULT_NAMESPACE = "default"


class TagParts(NamedTuple):
    id: str
    namespace: str
    value: str


def normalize_tag(raw_tag: str) -> TagParts | None:
    """Decompose a raw hashtag into its normalized id, namespace and value.

    Strips surrounding whitespace and one leading ``#``, lowercases, and splits on
    the first ``/``. Returns None for tags that reduce to nothing or that have
    an empty namespace or value segment (``#``, ``#/x``, ``#x/``).
    """
    clean = (raw_tag or "").strip()
    if clean.startswith("#"):
        clean = clean[1:]
    clean = clean.lower()
    if not clean:
        return None

    namespace, sep, value = clean.partition("/")
    if not sep:
        return TagParts(id=clean, namespace=DEFAULT_NAMESPACE, value=clean)
    if not namespace or not value:
        return None
    return TagParts(id=clean, namespace=namespace, value=value)


class TagEntry(AppBaseModel):
    """One registry row tracking a tag's identity, usage count and recency."""

    id: str = Field(min_length=1, description="Lowercased namespace/value, or value without namespace")
    namespace: str = Field(default=DEFAULT_NAMESPACE, min_length=1)
    value: str = Field(min_length=1)
    count: int = Field(default=1, ge=1, description="Number of registrations")
    last_used: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        alias="lastUsed",
        description="Instant of the most recent registration",
    )

    @field_validator("last_used")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        """Treat naive timestamps from older snapshots as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display(self) -> str:
        if self.namespace == DEFAULT_NAMESPACE:
            return self.value
        return f"{self.namespace}/{self.value}"
