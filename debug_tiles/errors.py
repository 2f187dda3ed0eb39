"""Error types and standardized error responses."""
from __future__ import annotations

from typing import Any, Optional
from pydantic import BaseModel


class TileRenderError(ValueError):
    """Raised when a tile cannot be rendered with the requested parameters."""


class TileEncodeError(RuntimeError):
    """Raised when a rendered tile cannot be serialized to PNG."""


class ErrorResponse(BaseModel):
    """Standard error response model."""
    code: str
    message: str
    details: Optional[Any] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "code": "tile_not_found",
                "message": "Not a tile path",
                "details": {"path": "/abc/3/5.png"},
            }
        }
    }
