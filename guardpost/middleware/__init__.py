"""ASGI middleware installed by :func:`guardpost.app.create_app`."""

from guardpost.middleware.json_body import JSONBodyMiddleware
from guardpost.middleware.json_body import get_json_body

__all__ = ["JSONBodyMiddleware", "get_json_body"]
