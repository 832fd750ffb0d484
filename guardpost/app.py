"""Application factory.

Builds the FastAPI instance from an explicit :class:`Settings` value so
tests and the bootstrap can each hand in their own configuration and route
collections.
"""

from __future__ import annotations

import logging
from typing import Iterable

from fastapi import FastAPI

from guardpost import __version__
from guardpost.config import Settings
from guardpost.middleware.json_body import JSONBodyMiddleware
from guardpost.routes import RouteCollection
from guardpost.routes import default_collections

logger = logging.getLogger(__name__)


def create_app(settings: Settings, collections: Iterable[RouteCollection] | None = None) -> FastAPI:
    """Return a FastAPI app with the JSON parser and route collections wired.

    When *collections* is omitted the ``/auth`` and ``/protected`` collections
    are resolved from *settings*.  Paths outside every prefix are left to
    FastAPI's default ``404``.
    """

    app = FastAPI(title="guardpost", version=__version__)
    app.state.settings = settings

    app.add_middleware(JSONBodyMiddleware, limit=settings.json_limit, strict=settings.json_strict)

    if collections is None:
        collections = default_collections(settings)
    for collection in collections:
        app.include_router(collection.router, prefix=collection.prefix)
        logger.debug("Mounted %s routes under %s", collection.name, collection.prefix)

    return app


__all__ = ["create_app"]
