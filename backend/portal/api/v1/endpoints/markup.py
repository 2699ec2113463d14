from __future__ import annotations

from fastapi import APIRouter, Depends, status

from portal.api.v1.schemas.markup import RenderRequest, TokenizeRequest
from portal.core.markup.tokenizer import extract_hashtags, tokenize
from portal.core.schemas.auth import AuthUser
from portal.core.schemas.markup import RenderedDocument, TokenizedDocument
from portal.core.services.render_service import RenderService
from portal.dependencies import get_current_user, get_render_service

router = APIRouter()


@router.post("/tokenize", response_model=TokenizedDocument)
async def tokenize_markup(
    payload: TokenizeRequest,
    current_user: AuthUser = Depends(get_current_user),
):
    """Tokenize markup without touching the tag registry."""
    tokens = tokenize(payload.content)
    return TokenizedDocument(tokens=tokens, hashtags=extract_hashtags(tokens))


@router.post("/render", response_model=RenderedDocument)
async def render_markup(
    payload: RenderRequest,
    current_user: AuthUser = Depends(get_current_user),
    service: RenderService = Depends(get_render_service),
):
    """Tokenize markup and register its hashtags for the current session.

    Tags are counted once per distinct (document_id, content) pair, so clients may
    re-render freely.
    """
    return await service.render(
        session_id=current_user.session_id,
        content=payload.content,
        document_id=payload.document_id,
    )


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def end_render_session(
    current_user: AuthUser = Depends(get_current_user),
    service: RenderService = Depends(get_render_service),
):
    """End the current session: persist its tag registry and release its memory."""
    await service.end_session(current_user.session_id)
    return None
