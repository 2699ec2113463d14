from __future__ import annotations

from pydantic import Field

from portal.core.models.base import AppBaseModel


class TokenizeRequest(AppBaseModel):
    content: str = Field(default="", description="Raw markup text")


class RenderRequest(AppBaseModel):
    content: str = Field(default="", description="Raw markup text")
    document_id: str | None = Field(
        default=None,
        max_length=255,
        description="Stable id of the post or reply; re-renders of the same content register tags once",
    )
