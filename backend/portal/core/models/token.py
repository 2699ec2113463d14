from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field

from .base import FrozenModel


class TextToken(FrozenModel):
    type: Literal["text"] = "text"
    content: str


class BoldToken(FrozenModel):
    type: Literal["bold"] = "bold"
    content: str


class ItalicToken(FrozenModel):
    type: Literal["italic"] = "italic"
    content: str


class CodeToken(FrozenModel):
    type: Literal["code"] = "code"
    content: str


class CodeBlockToken(FrozenModel):
    type: Literal["codeblock"] = "codeblock"
    content: str
    lang: str | None = Field(default=None, description="Language tag after the opening fence")


class LinkToken(FrozenModel):
    type: Literal["link"] = "link"
    text: str
    url: str


class BulletToken(FrozenModel):
    type: Literal["bullet"] = "bullet"
    content: str


class BlockquoteToken(FrozenModel):
    type: Literal["blockquote"] = "blockquote"
    content: str


class HashtagToken(FrozenModel):
    type: Literal["hashtag"] = "hashtag"
    raw: str = Field(description="Hashtag text including the leading '#'")


class NewlineToken(FrozenModel):
    type: Literal["newline"] = "newline"


Token = Annotated[
    Union[
        TextToken,
        BoldToken,
        ItalicToken,
        CodeToken,
        CodeBlockToken,
        LinkToken,
        BulletToken,
        BlockquoteToken,
        HashtagToken,
        NewlineToken,
    ],
    Field(discriminator="type"),
]
