from __future__ import annotations

from pydantic import Field

from portal.core.models.base import AppBaseModel
from portal.core.models.token import Token  # noqa: TCH001


class TokenizedDocument(AppBaseModel):
    """Token stream for one document plus the hashtags found in it."""

    tokens: list[Token] = Field(default_factory=list)
    hashtags: list[str] = Field(default_factory=list, description="Raw hashtags in reading order")


class RenderedDocument(TokenizedDocument):
    registered: bool = Field(
        default=False,
        description="Whether this render registered its hashtags (False for re-renders of unchanged content)",
    )
