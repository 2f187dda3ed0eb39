from __future__ import annotations

import logging
import socket

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from debug_tiles.config import settings
from debug_tiles.logging_utils import configure_logging, log_event
from debug_tiles.routes import metadata_router, tiles_router, version_router
from debug_tiles.routes.metadata import STATIC_DIR

LOGGER = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.version)

app.include_router(version_router)
app.include_router(metadata_router)
app.include_router(tiles_router)
# Everything the routers above do not claim falls through to the bundled assets.
app.mount("/", StaticFiles(directory=STATIC_DIR), name="static")


def bind_listener(host: str, port: int) -> socket.socket:
    """Bind a listening TCP socket; port 0 lets the OS choose."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.listen(socket.SOMAXCONN)
    return sock


def listen_url(sock: socket.socket) -> str:
    host, port = sock.getsockname()[:2]
    return f"http://{host}:{port}"


def run() -> None:
    """Bind, announce the listen address on stdout, and serve."""
    configure_logging(settings.log_level)
    try:
        sock = bind_listener(settings.bind_host, settings.port)
    except OSError as exc:
        log_event(
            LOGGER,
            "server.bind",
            "Could not bind listener",
            level="critical",
            host=settings.bind_host,
            port=settings.port,
            error=str(exc),
        )
        raise SystemExit(1) from exc

    print(listen_url(sock), flush=True)

    config = uvicorn.Config(app, log_level=settings.log_level.lower())
    server = uvicorn.Server(config)
    server.run(sockets=[sock])


# -------- local dev entrypoint --------
if __name__ == "__main__":
    run()
