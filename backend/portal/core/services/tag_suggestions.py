from __future__ import annotations

import re
from typing import TYPE_CHECKING

from portal.core.models.tag import DEFAULT_NAMESPACE
from portal.core.schemas.tag_suggestions import NamespaceGroup, TagSuggestions, TagTrigger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from portal.core.models.tag import TagEntry
    from portal.core.services.tag_registry import TagRegistry

NAMESPACE_ORDER = ("priority", "status", "team", "type", "area", DEFAULT_NAMESPACE)

_WHITESPACE_RE = re.compile(r"\s")


def normalize_search_term(search_term: str | None) -> str:
    term = (search_term or "").strip().lower()
    return term[1:] if term.startswith("#") else term


def rank_suggestions(tags: Iterable[TagEntry], search_term: str, limit: int = 5) -> list[TagEntry]:
    """Filter tags containing the term; prefix matches first, then by count."""
    term = normalize_search_term(search_term)
    matches = [t for t in tags if term in t.id]
    matches.sort(key=lambda t: (not t.id.startswith(term), -t.count))
    return matches[:max(limit, 0)]


def suggest_tags(registry: TagRegistry, search_term: str, limit: int = 5) -> TagSuggestions:
    """Autocomplete suggestions, with a create-new fallback when nothing matches."""
    term = normalize_search_term(search_term)
    suggestions = rank_suggestions(registry.get_all_tags(), term, limit=limit)
    return TagSuggestions(
        search_term=term,
        suggestions=suggestions,
        create_candidate=term if term and not suggestions else None,
    )


def group_by_namespace(tags: Iterable[TagEntry]) -> list[NamespaceGroup]:
    """Group tags per namespace, well-known namespaces first, others alphabetical."""
    groups: dict[str, list[TagEntry]] = {}
    for tag in tags:
        groups.setdefault(tag.namespace, []).append(tag)

    def _order(namespace: str) -> tuple[int, str]:
        if namespace in NAMESPACE_ORDER:
            return NAMESPACE_ORDER.index(namespace), ""
        return len(NAMESPACE_ORDER), namespace

    return [NamespaceGroup(namespace=ns, tags=groups[ns]) for ns in sorted(groups, key=_order)]


def detect_tag_trigger(text: str, cursor: int | None = None) -> TagTrigger | None:
    """Find the hashtag being typed at the cursor.

    Looks back from the cursor for the last '#'; the tag is active only while no
    whitespace separates it from the cursor.
    """
    if cursor is None:
        cursor = len(text)
    before = text[:max(0, min(cursor, len(text)))]
    index = before.rfind("#")
    if index == -1:
        return None
    term = before[index + 1:]
    if _WHITESPACE_RE.search(term):
        return None
    return TagTrigger(trigger_index=index, search_term=term)


def apply_tag_selection(text: str, trigger: TagTrigger, tag: str) -> str:
    """Replace '#<term>' at the trigger with '#<tag> '."""
    selected = tag[1:] if tag.startswith("#") else tag
    before = text[:trigger.trigger_index]
    after = text[trigger.trigger_index + 1 + len(trigger.search_term):]
    return f"{before}#{selected} {after}"
