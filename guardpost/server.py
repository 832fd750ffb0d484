"""Server bootstrap – the one-shot startup sequence.

``main()`` loads configuration, configures logging, builds the app, binds
the listening socket and hands it to uvicorn.  Binding happens *before*
uvicorn starts so that an occupied port surfaces as :class:`BindError` and
a non-zero exit status instead of a half-started server.  There is no retry.
"""

from __future__ import annotations

import logging
import socket
import sys
from typing import Iterable

import uvicorn

from guardpost.app import create_app
from guardpost.config import Settings
from guardpost.config import get_settings
from guardpost.errors import BindError
from guardpost.errors import GuardpostError
from guardpost.routes import RouteCollection

logger = logging.getLogger(__name__)

_BACKLOG = 2048


def configure_logging(level_name: str) -> int:
    """Configure root logging once and return the numeric level used."""

    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s - %(message)s", handlers=[logging.StreamHandler()])
    return level


def bind_socket(host: str, port: int) -> socket.socket:
    """Return a listening TCP socket on *host*:*port* or raise :class:`BindError`."""

    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    if sys.platform != "win32":
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
        sock.listen(_BACKLOG)
    except OSError as exc:
        sock.close()
        raise BindError(host, port, exc.strerror or str(exc)) from exc
    sock.set_inheritable(True)
    return sock


def serve(settings: Settings, collections: Iterable[RouteCollection] | None = None) -> None:
    """Build the app, bind the port and serve until uvicorn is told to stop.

    The readiness line is logged once the socket is bound and listening;
    connections queue from that point while uvicorn runs the app lifespan.
    """

    app = create_app(settings, collections)
    sock = bind_socket(settings.host, settings.port)
    logger.info("Server is running on port %d", settings.port)

    config = uvicorn.Config(app, log_level=logging.getLogger().getEffectiveLevel())
    server = uvicorn.Server(config)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()


def main() -> None:
    """Console entry point: start the server or exit with status 1."""

    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        serve(settings)
    except GuardpostError as exc:
        logger.error("Startup failed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
