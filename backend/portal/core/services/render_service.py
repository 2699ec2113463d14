from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from portal.core.markup.tokenizer import extract_hashtags, tokenize
from portal.core.schemas.markup import RenderedDocument
from portal.utils.logging import get_logger

if TYPE_CHECKING:
    from portal.core.services.tag_registry_service import TagRegistryService

logger = get_logger(__name__)


def content_digest(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class RenderService:
    """Tokenizes documents and feeds their hashtags to the session's tag registry.

    Registration is keyed on content identity: only the latest digest of each
    (session, document) is remembered, so rendering unchanged content again
    returns the tokens without counting its tags twice. Documents without an id
    share one slot per session.
    """

    def __init__(self, registry_service: TagRegistryService) -> None:
        self._registry_service = registry_service
        self._rendered: dict[str, dict[str | None, str]] = {}

    async def render(self, *, session_id: str, content: str, document_id: str | None = None) -> RenderedDocument:
        tokens = tokenize(content)
        hashtags = extract_hashtags(tokens)

        latest = self._rendered.setdefault(session_id, {})
        digest = content_digest(content)
        registered = False
        if latest.get(document_id) != digest:
            latest[document_id] = digest
            if hashtags:
                entries = await self._registry_service.register_tags(session_id, hashtags)
                registered = bool(entries)
                logger.debug("Registered %d of %d hashtags for document %s", len(entries), len(hashtags), document_id)

        return RenderedDocument(tokens=tokens, hashtags=hashtags, registered=registered)

    def rendered_documents(self, session_id: str) -> int:
        return len(self._rendered.get(session_id, {}))

    async def end_session(self, session_id: str) -> None:
        """Forget rendered documents and persist then unload the session's registry."""
        self._rendered.pop(session_id, None)
        await self._registry_service.close_session(session_id)
