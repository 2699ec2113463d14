from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from portal.api.v1.schemas.tag import (
    TagApplyRequest,
    TagRegisterRequest,
    TagTextResponse,
    TagTriggerRequest,
)
from portal.config import settings
from portal.core.models.tag import TagEntry
from portal.core.schemas.auth import AuthUser
from portal.core.schemas.tag_suggestions import NamespaceGroup, TagSuggestions, TagTrigger
from portal.core.services.tag_registry import TagRegistry
from portal.core.services.tag_registry_service import TagRegistryService
from portal.core.services.tag_suggestions import (
    apply_tag_selection,
    detect_tag_trigger,
    group_by_namespace,
    suggest_tags,
)
from portal.dependencies import get_current_user, get_session_registry, get_tag_registry_service

router = APIRouter()


@router.get("/", response_model=list[TagEntry])
async def list_tags(registry: TagRegistry = Depends(get_session_registry)):
    """All known tags, most used first."""
    return registry.get_all_tags()


@router.post("/", response_model=TagEntry)
async def register_tag(
    payload: TagRegisterRequest,
    current_user: AuthUser = Depends(get_current_user),
    service: TagRegistryService = Depends(get_tag_registry_service),
):
    registered = await service.register_tags(current_user.session_id, [payload.tag])
    if not registered:
        raise HTTPException(
            status_code=422,
            detail="Tag is empty or malformed",
        )
    return registered[0]


@router.get("/popular", response_model=list[TagEntry])
async def popular_tags(
    limit: int = Query(default=settings.popular_tags_limit, ge=1, le=100),
    registry: TagRegistry = Depends(get_session_registry),
):
    return registry.get_popular_tags(limit)


@router.get("/directory", response_model=list[NamespaceGroup])
async def tag_directory(registry: TagRegistry = Depends(get_session_registry)):
    """Tags grouped by namespace for browsing."""
    return group_by_namespace(registry.get_all_tags())


@router.get("/suggest", response_model=TagSuggestions)
async def suggest(
    q: str = Query(default="", max_length=100, description="Text typed after '#'"),
    limit: int = Query(default=settings.tag_suggestion_limit, ge=1, le=50),
    registry: TagRegistry = Depends(get_session_registry),
):
    return suggest_tags(registry, q, limit=limit)


@router.get("/namespaces/{namespace}", response_model=list[TagEntry])
async def tags_by_namespace(namespace: str, registry: TagRegistry = Depends(get_session_registry)):
    return registry.get_tags_by_namespace(namespace)


@router.post("/trigger", response_model=TagTrigger | None)
async def find_trigger(payload: TagTriggerRequest, current_user: AuthUser = Depends(get_current_user)):
    """Locate the hashtag being typed at the cursor, if any."""
    return detect_tag_trigger(payload.text, payload.cursor)


@router.post("/apply", response_model=TagTextResponse)
async def apply_selection(payload: TagApplyRequest, current_user: AuthUser = Depends(get_current_user)):
    """Replace the typed '#term' with the selected tag."""
    if payload.trigger.trigger_index >= len(payload.text) or payload.text[payload.trigger.trigger_index] != "#":
        raise HTTPException(status_code=422, detail="Trigger does not point at '#'")
    return TagTextResponse(text=apply_tag_selection(payload.text, payload.trigger, payload.tag))


@router.get("/{tag_id:path}", response_model=TagEntry)
async def get_tag(tag_id: str, registry: TagRegistry = Depends(get_session_registry)):
    entry = registry.get_tag(tag_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return entry
