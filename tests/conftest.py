"""Shared fixtures: settings without ambient env, echo route collections."""

from typing import Any

import pytest
from fastapi import APIRouter
from fastapi import Depends
from fastapi import Request
from fastapi.testclient import TestClient

from guardpost.app import create_app
from guardpost.config import Settings
from guardpost.config import load_settings
from guardpost.constants import AUTH_PREFIX
from guardpost.constants import PROTECTED_PREFIX
from guardpost.middleware import get_json_body
from guardpost.routes import RouteCollection


def echo_router(name: str) -> APIRouter:
    """Router that reports exactly what reached it."""

    router = APIRouter()

    @router.post("/typed")
    async def typed(payload: dict) -> dict:
        return {"collection": name, "payload": payload}

    @router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    async def echo(request: Request, path: str, body: Any = Depends(get_json_body)) -> dict:
        return {
            "collection": name,
            "method": request.method,
            "path": path,
            "trace": request.headers.get("x-trace"),
            "body": body,
        }

    return router


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings built from an empty environment and no env file."""

    return load_settings(environ={}, env_file=tmp_path / "absent.env")


@pytest.fixture
def collections() -> list[RouteCollection]:
    return [
        RouteCollection(name="auth", prefix=AUTH_PREFIX, router=echo_router("auth")),
        RouteCollection(name="protected", prefix=PROTECTED_PREFIX, router=echo_router("protected")),
    ]


@pytest.fixture
def client(settings, collections):
    with TestClient(create_app(settings, collections)) as test_client:
        yield test_client
