"""FastAPI routes for synthetic raster tiles."""

from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse

from debug_tiles.config import settings
from debug_tiles.errors import ErrorResponse, TileEncodeError
from debug_tiles.logging_utils import log_event
from debug_tiles.render import tile as tile_render
from debug_tiles.render.tile import TileCoordinate

LOGGER = logging.getLogger(__name__)

tiles_router = APIRouter(tags=["tiles"])

# Optional sign and ASCII digits; no whitespace or underscores.
_INT_RE = re.compile(r"[+-]?[0-9]+")
_Y_RE = re.compile(r"(?P<y>[+-]?[0-9]+)(?:@(?P<scale>[0-9]+)x)?\.png")

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}

# Coordinates must fit a signed 64-bit integer.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
_MAX_DIGITS = len(str(INT64_MAX))


def _parse_int(value: str) -> Optional[int]:
    if not _INT_RE.fullmatch(value):
        return None
    digits = value.lstrip("+-").lstrip("0") or "0"
    if len(digits) > _MAX_DIGITS:
        return None
    number = -int(digits) if value.startswith("-") else int(digits)
    if number < INT64_MIN or number > INT64_MAX:
        return None
    return number


def parse_tile_path(z: str, x: str, yext: str) -> Optional[TileCoordinate]:
    """Parse ``/{z}/{x}/{y}[@{n}x].png`` segments; ``None`` if malformed."""
    match = _Y_RE.fullmatch(yext)
    if match is None:
        return None
    zi = _parse_int(z)
    xi = _parse_int(x)
    yi = _parse_int(match.group("y"))
    scale = _parse_int(match.group("scale") or "1")
    if zi is None or xi is None or yi is None or scale is None:
        return None
    if scale < 1 or scale > settings.max_scale:
        return None
    return TileCoordinate(z=zi, x=xi, y=yi, scale=scale)


def _not_found(path: str) -> JSONResponse:
    body = ErrorResponse(code="tile_not_found", message="Not a tile path", details={"path": path})
    return JSONResponse(body.model_dump(), status_code=status.HTTP_404_NOT_FOUND, headers=CORS_HEADERS)


@tiles_router.get(
    "/{z}/{x}/{yext}",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}, 404: {"model": ErrorResponse}},
)
def get_tile(z: str, x: str, yext: str):
    """Render a placeholder PNG labeled with its tile coordinates."""
    coord = parse_tile_path(z, x, yext)
    if coord is None:
        LOGGER.debug("Rejected tile path /%s/%s/%s", z, x, yext)
        return _not_found(f"/{z}/{x}/{yext}")

    try:
        content = tile_render.render_tile_png(coord)
    except TileEncodeError as exc:
        log_event(
            LOGGER,
            "tile.encode",
            "PNG encoding failed",
            level="error",
            z=coord.z,
            x=coord.x,
            y=coord.y,
            error=str(exc),
        )
        return PlainTextResponse(str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(content=content, media_type="image/png", headers=CORS_HEADERS)
