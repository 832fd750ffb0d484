"""Route collections mounted by the bootstrap.

The application never knows what lives inside ``/auth`` or ``/protected`` –
it only needs *a router plus the prefix to mount it under*.  Concrete
collections are either the bundled placeholders or whatever ``AUTH_ROUTES`` /
``PROTECTED_ROUTES`` point at (``package.module`` or ``package.module:attr``).
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass

from fastapi import APIRouter

from guardpost.config import Settings
from guardpost.constants import AUTH_PREFIX
from guardpost.constants import PROTECTED_PREFIX
from guardpost.errors import ConfigurationError

AUTH_PLACEHOLDER = "guardpost.routes.auth:router"
PROTECTED_PLACEHOLDER = "guardpost.routes.protected:router"


@dataclass(frozen=True)
class RouteCollection:
    """A named router mounted under a common path prefix."""

    name: str
    prefix: str
    router: APIRouter


def load_route_collection(target: str, *, name: str, prefix: str) -> RouteCollection:
    """Import *target* and wrap it as a :class:`RouteCollection`.

    *target* is ``module`` (attribute ``router`` is used) or ``module:attr``.
    The attribute may already be a :class:`RouteCollection`, in which case
    its router is re-mounted under *prefix*.
    """

    module_name, _, attr = target.partition(":")
    attr = attr or "router"
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import {name} routes from {target!r}: {exc}") from exc

    obj = getattr(module, attr, None)
    if isinstance(obj, RouteCollection):
        obj = obj.router
    if not isinstance(obj, APIRouter):
        raise ConfigurationError(f"{target!r} does not name an APIRouter (got {type(obj).__name__})")
    return RouteCollection(name=name, prefix=prefix, router=obj)


def default_collections(settings: Settings) -> list[RouteCollection]:
    """Return the ``/auth`` and ``/protected`` collections for *settings*."""

    return [
        load_route_collection(settings.auth_routes or AUTH_PLACEHOLDER, name="auth", prefix=AUTH_PREFIX),
        load_route_collection(
            settings.protected_routes or PROTECTED_PLACEHOLDER, name="protected", prefix=PROTECTED_PREFIX
        ),
    ]


__all__ = ["RouteCollection", "default_collections", "load_route_collection"]
