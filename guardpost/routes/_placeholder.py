"""Shared factory for the placeholder route collections."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse

_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def placeholder_router(collection: str) -> APIRouter:
    """Return a router answering ``501`` for every request it receives."""

    router = APIRouter(tags=[collection])

    @router.api_route("/{path:path}", methods=_METHODS, include_in_schema=False)
    async def not_implemented(request: Request, path: str) -> JSONResponse:
        body: dict[str, Any] = {
            "detail": f"No {collection} route collection is configured",
            "collection": collection,
            "method": request.method,
            "path": "/" + path,
        }
        return JSONResponse(status_code=status.HTTP_501_NOT_IMPLEMENTED, content=body)

    return router
