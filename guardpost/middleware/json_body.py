"""ASGI middleware that parses JSON request bodies before routing.

Every HTTP request whose ``Content-Type`` is ``application/json`` (or an
``application/*+json`` variant) and whose body is non-empty is read in full
and decoded here.  The parsed value ends up in ``request.state.json`` and the
raw bytes are replayed to the wrapped application, so route handlers may use
either the pre-parsed value or ordinary FastAPI body parameters.

Bodies that cannot be used are answered directly by the middleware – the
route handler never runs:

* unparsable JSON, ``NaN``/``Infinity`` tokens, nesting too deep to decode
  or a top-level scalar in *strict* mode                   → ``400``
* body larger than the configured limit                    → ``413``
* a ``charset`` other than UTF-8                            → ``415``
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import Request
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp
from starlette.types import Message
from starlette.types import Receive
from starlette.types import Scope
from starlette.types import Send

from guardpost.constants import DEFAULT_JSON_LIMIT
from guardpost.errors import MalformedRequestBody

logger = logging.getLogger(__name__)

_UTF8_CHARSETS = {"utf-8", "utf8"}


class _ClientDisconnected(Exception):
    """Peer went away before the body was complete."""


def is_json_content_type(value: str | None) -> bool:
    """Return *True* for ``application/json`` and ``application/*+json``."""

    if not value:
        return False
    media_type = value.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or (
        media_type.startswith("application/") and media_type.endswith("+json")
    )


def _reject_constant(token: str) -> Any:
    # NaN and Infinity are Python extensions, not JSON
    raise ValueError(f"Invalid JSON constant {token}")


def _charset(value: str) -> str | None:
    for param in value.split(";")[1:]:
        key, _, raw = param.partition("=")
        if key.strip().lower() == "charset":
            return raw.strip().strip('"').lower()
    return None


class JSONBodyMiddleware:  # noqa: D401 – ASGI middleware
    """Parse JSON bodies into ``request.state.json`` (HTTP only)."""

    def __init__(self, app: ASGIApp, limit: int = DEFAULT_JSON_LIMIT, strict: bool = True) -> None:
        self.app = app
        self.limit = limit
        self.strict = strict

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:  # noqa: D401 – ASGI
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        state["json"] = None

        headers = Headers(scope=scope)
        content_type = headers.get("content-type")
        if not is_json_content_type(content_type):
            await self.app(scope, receive, send)
            return

        try:
            body = await self._read_body(headers, receive)
            if body:
                state["json"] = self._parse(content_type or "", body)
        except _ClientDisconnected:
            logger.debug("Client disconnected while sending %s %s", scope["method"], scope["path"])
            return
        except MalformedRequestBody as exc:
            logger.info("Rejected body of %s %s: %s", scope["method"], scope["path"], exc.detail)
            response = JSONResponse({"detail": exc.detail}, status_code=exc.status_code)
            await response(scope, receive, send)
            return

        await self.app(scope, _replay(body, receive), send)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _read_body(self, headers: Headers, receive: Receive) -> bytes:
        declared = headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.limit:
            raise MalformedRequestBody("Request body too large", status_code=413)

        chunks: list[bytes] = []
        size = 0
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                raise _ClientDisconnected()
            chunk = message.get("body", b"")
            size += len(chunk)
            if size > self.limit:
                raise MalformedRequestBody("Request body too large", status_code=413)
            chunks.append(chunk)
            if not message.get("more_body", False):
                return b"".join(chunks)

    def _parse(self, content_type: str, body: bytes) -> Any:
        charset = _charset(content_type)
        if charset is not None and charset not in _UTF8_CHARSETS:
            raise MalformedRequestBody(f"Unsupported charset {charset!r}", status_code=415)
        try:
            value = json.loads(body.decode("utf-8"), parse_constant=_reject_constant)
        except (ValueError, RecursionError) as exc:
            raise MalformedRequestBody("Malformed JSON body") from exc
        if self.strict and not isinstance(value, (dict, list)):
            raise MalformedRequestBody("Malformed JSON body")
        return value


def _replay(body: bytes, receive: Receive) -> Receive:
    """Return a ``receive`` callable that yields *body* once, then delegates."""

    consumed = False

    async def replay() -> Message:
        nonlocal consumed
        if not consumed:
            consumed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


def get_json_body(request: Request) -> Any:
    """FastAPI dependency returning the body parsed by the middleware."""

    return getattr(request.state, "json", None)
