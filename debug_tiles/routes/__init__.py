"""API route package for the FastAPI application."""

from .metadata import metadata_router
from .tiles import tiles_router
from .version import version_router

__all__ = ["metadata_router", "tiles_router", "version_router"]
