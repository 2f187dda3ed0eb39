"""TileJSON metadata document for the tile endpoint."""

from __future__ import annotations

import json
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from starlette.requests import Request

TILEJSON_VERSION = "3.0.0"
TILE_URL_PATH = "/{z}/{x}/{y}.png"
DEFAULT_MAXZOOM = 30
DEFAULT_TILE_SIZE = 256
ALWAYS_EMITTED = frozenset({"tilejson", "tiles", "minzoom", "maxzoom"})


class TileJSON(BaseModel):
    """TileJSON 3.0.0 document.

    ``tilejson``, ``tiles``, ``minzoom`` and ``maxzoom`` are always emitted;
    the remaining fields are dropped from the body when None, empty or zero.
    """

    model_config = ConfigDict(populate_by_name=True)

    tilejson: str = TILEJSON_VERSION
    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    attribution: Optional[str] = None
    # URLs with {z}, {x}, {y} placeholders
    tiles: list[str]
    minzoom: int = 0
    maxzoom: int = DEFAULT_MAXZOOM
    # [lonmin, latmin, lonmax, latmax]
    bounds: Optional[list[float]] = None
    # [lon, lat, z]
    center: Optional[list[float]] = None
    # xyz (default) or tms
    scheme: Optional[str] = None
    tile_size: Optional[int] = Field(default=None, alias="tileSize")
    # "terrarium" or "mapbox"
    encoding: Optional[str] = None
    template: Optional[str] = None
    legend: Optional[str] = None
    grids: Optional[list[str]] = None

    def to_dict(self) -> dict:
        """Dump by alias, dropping empty or zero optional fields."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        return {k: v for k, v in data.items() if k in ALWAYS_EMITTED or v not in ("", 0, [])}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


def request_origin(request: Request, *, trust_forwarded: bool) -> str:
    """Return ``scheme://host`` as seen by the client.

    With ``trust_forwarded`` the reverse proxy's ``X-Forwarded-Proto`` and
    ``X-Forwarded-Host`` win over the request's own scheme and Host header.
    """
    scheme = request.url.scheme
    host = request.headers.get("host") or request.url.netloc
    if trust_forwarded:
        fwd_proto = request.headers.get("x-forwarded-proto", "").split(",")[0].strip()
        fwd_host = request.headers.get("x-forwarded-host", "").split(",")[0].strip()
        scheme = fwd_proto or scheme
        host = fwd_host or host
    return f"{scheme}://{host}"


def build_tilejson(origin: str) -> TileJSON:
    """Describe the tile endpoint served at ``origin``."""
    return TileJSON(
        tilejson=TILEJSON_VERSION,
        tiles=[f"{origin}{TILE_URL_PATH}"],
        maxzoom=DEFAULT_MAXZOOM,
        tile_size=DEFAULT_TILE_SIZE,
    )
