from __future__ import annotations

from pydantic import Field, field_validator

from portal.core.models.base import AppBaseModel
from portal.core.schemas.tag_suggestions import TagTrigger  # noqa: TCH001


class TagRegisterRequest(AppBaseModel):
    tag: str = Field(max_length=100, description="Tag text, with or without the leading '#'")


class TagTriggerRequest(AppBaseModel):
    text: str
    cursor: int | None = Field(default=None, ge=0, description="Cursor offset; defaults to end of text")


class TagApplyRequest(AppBaseModel):
    text: str
    trigger: TagTrigger
    tag: str = Field(min_length=1, max_length=100)

    @field_validator("tag")
    @classmethod
    def validate_tag(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped or stripped == "#":
            raise ValueError("Tag must not be empty")
        return stripped


class TagTextResponse(AppBaseModel):
    text: str
