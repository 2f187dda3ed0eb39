"""Build identity of the running tile server."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from debug_tiles.buildinfo import VersionProvider, get_version_provider
from debug_tiles.config import settings

version_router = APIRouter(tags=["version"])


@version_router.get("/version")
def version(version_provider: VersionProvider = Depends(get_version_provider)) -> dict:
    """Same build string as the landing page footer, plus deployment metadata."""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "build": version_provider(),
        "environment": settings.environment,
    }
