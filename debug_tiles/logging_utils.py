"""Event-tagged log lines for the tile server.

Every message starts with a dotted event name (``tile.encode``,
``tile.glyph_fallback``, ``server.bind``...) so request failures can be
grepped out of the uvicorn log stream. Keyword fields are appended as sorted
JSON and also attached to the record as ``extra``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _fields_json(fields: Mapping[str, Any]) -> str:
    """Render event fields as compact JSON; unknown types fall back to str()."""
    return json.dumps(dict(fields), default=str, sort_keys=True, separators=(",", ":"))


def log_event(
    logger: logging.Logger,
    event: str,
    message: str,
    *,
    level: str = "info",
    **fields: Any,
) -> None:
    """Log ``[event] message | {fields}`` at ``level``; None-valued fields are skipped.

    Example:
        log_event(LOGGER, "tile.encode", "PNG encoding failed", level="error", z=2, x=3, y=5)
    """
    context = {k: v for k, v in fields.items() if v is not None}
    line = f"[{event}] {message}"
    if context:
        line = f"{line} | {_fields_json(context)}"
    getattr(logger, level, logger.info)(line, extra={"event": event, **context})


def configure_logging(level: str = "INFO") -> None:
    """Root logging for the server process; uvicorn adds its own handlers."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
