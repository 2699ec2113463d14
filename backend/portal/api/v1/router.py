from __future__ import annotations

from fastapi import APIRouter

from .endpoints import health, markup, tags

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(markup.router, prefix="/markup", tags=["markup"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
