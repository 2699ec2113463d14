from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from portal.config import settings
from portal.core.services.tag_registry_service import TagRegistryService
from portal.dependencies import get_tag_registry_service

router = APIRouter()


@router.get("/")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "service": "portal-markup-api",
            "version": "0.1.0"
        }
    )


@router.get("/ready")
async def readiness_check(service: TagRegistryService = Depends(get_tag_registry_service)):
    """Readiness check endpoint."""
    store_ok = await service.is_store_available()
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "ready",
            "tag_store": settings.tag_store_backend,
            "tag_store_status": "connected" if store_ok else "unavailable",
            "api_prefix": settings.api_prefix
        }
    )
