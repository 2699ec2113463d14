from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import TYPE_CHECKING

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from portal.config import settings
from portal.core.repositories.implementations.file.tag_store import FileTagStateStore
from portal.core.repositories.implementations.memory.tag_store import InMemoryTagStateStore
from portal.core.schemas.auth import AuthUser
from portal.core.services.render_service import RenderService
from portal.core.services.tag_registry_service import TagRegistryService
from portal.db.base import create_request_supabase_client, get_supabase_admin_client
from portal.utils.logging import get_logger

logger = get_logger(__name__)

# Use auto_error=False to handle missing tokens gracefully
http_bearer = HTTPBearer(auto_error=False)

if TYPE_CHECKING:
    from portal.core.repositories.tag_store import TagStateStore
    from portal.core.services.tag_registry import TagRegistry


def build_tag_store() -> TagStateStore:
    """Create the tag store selected by `tag_store_backend`."""
    backend = settings.tag_store_backend
    logger.info("Using %s tag store", backend)
    if backend == "file":
        return FileTagStateStore(settings.tag_store_path)
    if backend == "supabase":
        from portal.core.repositories.implementations.supabase.tag_store import SupabaseTagStateStore

        return SupabaseTagStateStore(get_supabase_admin_client(), table_name=settings.tag_store_table)
    return InMemoryTagStateStore()


@lru_cache(maxsize=1)
def get_tag_registry_service() -> TagRegistryService:
    """Process-wide registry service; registries themselves are per session."""
    return TagRegistryService(build_tag_store(), namespace_key=settings.tag_store_key)


@lru_cache(maxsize=1)
def get_render_service() -> RenderService:
    return RenderService(get_tag_registry_service())


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(http_bearer),
) -> AuthUser:
    """Validate JWT via Supabase and return authenticated user."""
    if not settings.require_auth:
        return AuthUser.anonymous()
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    jwt = credentials.credentials
    if not jwt or len(jwt.split(".")) != 3:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format",
            headers={"WWW-Authenticate": "Bearer"},
        )
    supabase = create_request_supabase_client()
    try:
        resp = await asyncio.to_thread(lambda: supabase.auth.get_user(jwt))
    except Exception as err:
        error_msg = str(err).lower()
        logger.warning(
            "JWT validation failed",
            extra={
                "error_type": type(err).__name__,
                "error_summary": error_msg[:100] if error_msg else "Unknown error",
            }
        )
        detail = "Token is invalid or expired" if ("invalid" in error_msg or "expired" in error_msg) else "Authentication failed"
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from err
    user = getattr(resp, "user", None)
    user_id = getattr(user, "id", None) if user else None
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user data",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthUser(
        id=user_id,
        email=getattr(user, "email", None) or "",
        role=getattr(user, "role", None),
    )


async def get_session_registry(
    current_user: AuthUser = Depends(get_current_user),
    service: TagRegistryService = Depends(get_tag_registry_service),
) -> TagRegistry:
    """The current user's tag registry, restored from the store on first use."""
    return await service.get_registry(current_user.session_id)
