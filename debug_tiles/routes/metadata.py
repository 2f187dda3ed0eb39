"""Root endpoint: TileJSON for map clients, a landing page for browsers."""

from __future__ import annotations

import html
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import HTMLResponse, PlainTextResponse
from pydantic_core import PydanticSerializationError

from debug_tiles.buildinfo import VersionProvider, get_version_provider
from debug_tiles.config import settings
from debug_tiles.logging_utils import log_event
from debug_tiles.tilejson import build_tilejson, request_origin

LOGGER = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"
INDEX_PAGE = STATIC_DIR / "index.html"

TILEJSON_MEDIA_TYPE = "application/json"

metadata_router = APIRouter(tags=["metadata"])


def wants_html(request: Request) -> bool:
    return request.headers.get("accept", "").startswith("text/html")


def render_index_page(footer: str) -> str:
    """Landing page with the build identity appended as an ``<address>``."""
    page = INDEX_PAGE.read_text(encoding="utf-8")
    return f"{page}<address>{html.escape(footer)}</address>"


@metadata_router.get(
    "/",
    response_class=Response,
    responses={200: {"content": {TILEJSON_MEDIA_TYPE: {}, "text/html": {}}}},
)
def root(request: Request, version_provider: VersionProvider = Depends(get_version_provider)):
    """Serve the TileJSON document, or the landing page to browsers."""
    vary = {"Vary": "Accept"}
    if wants_html(request):
        return HTMLResponse(render_index_page(version_provider()), headers=vary)

    origin = request_origin(request, trust_forwarded=settings.trust_forwarded_headers)
    try:
        body = build_tilejson(origin).to_json()
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        log_event(LOGGER, "tilejson.serialize", "TileJSON serialization failed", level="error", error=str(exc))
        return PlainTextResponse(str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(
        content=body,
        media_type=TILEJSON_MEDIA_TYPE,
        headers={**vary, "Access-Control-Allow-Origin": "*"},
    )
