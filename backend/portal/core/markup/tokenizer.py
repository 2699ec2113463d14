from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from portal.config import settings
from portal.core.models.token import (
    BlockquoteToken,
    BoldToken,
    BulletToken,
    CodeBlockToken,
    CodeToken,
    HashtagToken,
    ItalicToken,
    LinkToken,
    NewlineToken,
    TextToken,
    Token,
)
from portal.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = get_logger(__name__)

FENCE = "```"
BULLET_RE = re.compile(r"^[-*]\s+")
QUOTE_RE = re.compile(r"^>\s*")

# Bold content may hold single asterisks but cannot start or end with one.
BOLD_RE = re.compile(r"\*\*([^*](?:.*?[^*])?)\*\*")
ITALIC_RE = re.compile(r"(?<!\*)\*([^*]+)\*(?!\*)")
CODE_RE = re.compile(r"`([^`]+)`")
LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
# ASCII word boundary, so "café#tag" still yields a hashtag.
HASHTAG_RE = re.compile(r"(?<!\w)#[A-Za-z0-9_\-/]+", re.ASCII)


@dataclass(frozen=True, slots=True)
class _Span:
    start: int
    end: int
    rank: int
    token: Token


# Lower rank wins when spans overlap.
_INLINE_PATTERNS: tuple[tuple[int, re.Pattern[str], Callable[[re.Match[str]], Token]], ...] = (
    (0, CODE_RE, lambda m: CodeToken(content=m.group(1))),
    (1, LINK_RE, lambda m: LinkToken(text=m.group(1), url=m.group(2))),
    (2, BOLD_RE, lambda m: BoldToken(content=m.group(1))),
    (3, ITALIC_RE, lambda m: ItalicToken(content=m.group(1))),
    (4, HASHTAG_RE, lambda m: HashtagToken(raw=m.group(0))),
)


def _collect_spans(line: str) -> list[_Span]:
    """Find inline spans and keep the non-overlapping ones, highest priority first."""
    candidates = [
        _Span(m.start(), m.end(), rank, build(m))
        for rank, pattern, build in _INLINE_PATTERNS
        for m in pattern.finditer(line)
    ]
    candidates.sort(key=lambda s: (s.rank, s.start))

    accepted: list[_Span] = []
    for span in candidates:
        if any(span.start < other.end and other.start < span.end for other in accepted):
            continue
        accepted.append(span)

    accepted.sort(key=lambda s: s.start)
    return accepted


def tokenize_inline(line: str, *, max_line_length: int | None = None) -> list[Token]:
    """Split a single line into text and inline tokens in left-to-right order."""
    if not line:
        return []

    limit = settings.markup_max_line_length if max_line_length is None else max_line_length
    if len(line) > limit:
        logger.warning("Line exceeds inline parsing ceiling", extra={"length": len(line), "limit": limit})
        return [TextToken(content=line)]

    tokens: list[Token] = []
    cursor = 0
    for span in _collect_spans(line):
        if span.start > cursor:
            tokens.append(TextToken(content=line[cursor:span.start]))
        tokens.append(span.token)
        cursor = span.end

    if cursor < len(line):
        tokens.append(TextToken(content=line[cursor:]))
    return tokens


def tokenize(
    source: str,
    *,
    max_length: int | None = None,
    max_line_length: int | None = None,
) -> list[Token]:
    """Convert free-form markup into an ordered token sequence.

    Block constructs (code fences, bullets, blockquotes) are recognized per line;
    every other line goes through inline extraction. A newline token separates
    consecutive lines. Malformed markup never raises and stays literal text; an
    unterminated fence swallows the rest of the input.

    Sources longer than ``max_length`` are tokenized up to the ceiling and the
    remainder is returned as a single trailing text token.
    """
    source = source or ""
    limit = settings.markup_max_source_length if max_length is None else max_length
    overflow = ""
    if len(source) > limit:
        logger.warning("Source exceeds tokenizer ceiling", extra={"length": len(source), "limit": limit})
        source, overflow = source[:limit], source[limit:]

    tokens: list[Token] = []
    lines = source.split("\n")
    last = len(lines) - 1
    i = 0
    while i <= last:
        line = lines[i]
        stripped = line.strip()

        if stripped.startswith(FENCE):
            lang = stripped[len(FENCE):].strip() or None
            body: list[str] = []
            i += 1
            while i <= last and not lines[i].strip().startswith(FENCE):
                body.append(lines[i])
                i += 1
            tokens.append(CodeBlockToken(content="\n".join(body), lang=lang))
        elif BULLET_RE.match(stripped):
            tokens.append(BulletToken(content=BULLET_RE.sub("", stripped, count=1)))
        elif stripped.startswith(">"):
            tokens.append(BlockquoteToken(content=QUOTE_RE.sub("", stripped, count=1)))
        else:
            tokens.extend(tokenize_inline(line, max_line_length=max_line_length))

        if i < last:
            tokens.append(NewlineToken())
        i += 1

    if overflow:
        tokens.append(TextToken(content=overflow))
    return tokens


def visible_text(tokens: Iterable[Token]) -> str:
    """Concatenate the visible content of tokens, markers removed."""
    parts: list[str] = []
    for token in tokens:
        if isinstance(token, NewlineToken):
            parts.append("\n")
        elif isinstance(token, LinkToken):
            parts.append(token.text)
        elif isinstance(token, HashtagToken):
            parts.append(token.raw)
        else:
            parts.append(token.content)
    return "".join(parts)


def extract_hashtags(tokens: Iterable[Token]) -> list[str]:
    """Raw hashtag texts in token order, one per occurrence."""
    return [token.raw for token in tokens if isinstance(token, HashtagToken)]
