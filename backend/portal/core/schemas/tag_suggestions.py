from __future__ import annotations

from pydantic import Field

from portal.core.models.base import AppBaseModel
from portal.core.models.tag import TagEntry  # noqa: TCH001


class TagSuggestions(AppBaseModel):
    """Ranked completions for a partially typed hashtag.

    - create_candidate: normalized search term offered as a new tag when nothing matched
    """

    search_term: str
    suggestions: list[TagEntry] = Field(default_factory=list)
    create_candidate: str | None = None


class TagTrigger(AppBaseModel):
    """The hashtag being typed immediately before the cursor."""

    trigger_index: int = Field(ge=0, description="Index of the '#' that opened the tag")
    search_term: str


class NamespaceGroup(AppBaseModel):
    namespace: str
    tags: list[TagEntry] = Field(default_factory=list)
