"""Centralised configuration helper.

Configuration is resolved **once** from an ordered list of sources and frozen
into a :class:`Settings` value that the rest of the package receives
explicitly.  Precedence, highest first:

1. the process environment (``os.environ`` or an injected mapping)
2. the dotenv file named by ``ENV_FILE`` (``.env`` by default), if present
3. built-in defaults

The dotenv file is parsed with *python-dotenv* but never written back into
``os.environ`` – variables set by the process always win and the environment
is left exactly as the process received it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from dataclasses import field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any
from typing import Mapping
from typing import Sequence

from dotenv import dotenv_values

from guardpost.constants import DEFAULT_ENV_FILE
from guardpost.constants import DEFAULT_HOST
from guardpost.constants import DEFAULT_JSON_LIMIT
from guardpost.constants import DEFAULT_PORT

logger = logging.getLogger(__name__)

_MAX_PORT = 65535


def _truthy(value: str | None) -> bool:  # noqa: D401 – small helper
    """Return *True* when *value* looks like an affirmative string."""

    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ConfigSource:
    """One named layer of key/value configuration."""

    name: str
    values: Mapping[str, str]


@dataclass(frozen=True)
class Settings:
    """Immutable snapshot of the merged configuration."""

    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    log_level: str = "INFO"
    auth_routes: str | None = None
    protected_routes: str | None = None
    json_limit: int = DEFAULT_JSON_LIMIT
    json_strict: bool = True
    values: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def get(self, key: str, default: Any = None) -> Any:
        """Return the raw configuration value for *key*."""
        return self.values.get(key, default)


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


def resolve_port(raw: str | None) -> int:
    """Return the port described by *raw* or :data:`DEFAULT_PORT`.

    Anything that is not a positive integer in the TCP range is reported and
    replaced by the default; it never aborts startup.
    """

    if raw is None or not raw.strip():
        return DEFAULT_PORT
    try:
        port = int(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-numeric PORT=%r, using %d", raw, DEFAULT_PORT)
        return DEFAULT_PORT
    if not 0 < port <= _MAX_PORT:
        logger.warning("Ignoring out-of-range PORT=%r, using %d", raw, DEFAULT_PORT)
        return DEFAULT_PORT
    return port


def _resolve_limit(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_JSON_LIMIT
    try:
        limit = int(raw.strip())
    except ValueError:
        limit = 0
    if limit <= 0:
        logger.warning("Ignoring invalid JSON_BODY_LIMIT=%r, using %d", raw, DEFAULT_JSON_LIMIT)
        return DEFAULT_JSON_LIMIT
    return limit


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


def _read_env_file(path: Path) -> dict[str, str]:
    """Parse a dotenv file; a missing file is simply an empty source."""

    if not path.is_file():
        logger.debug("No env file at %s", path)
        return {}
    # Keys declared without a value come back as None – they define nothing.
    return {key: value for key, value in dotenv_values(path).items() if value is not None}


def config_sources(environ: Mapping[str, str], env_file: str | os.PathLike[str] | None = None) -> list[ConfigSource]:
    """Return the configuration layers ordered from highest to lowest precedence."""

    path = Path(env_file) if env_file is not None else Path(environ.get("ENV_FILE") or DEFAULT_ENV_FILE)
    return [
        ConfigSource("environment", dict(environ)),
        ConfigSource(f"file:{path}", _read_env_file(path)),
    ]


def merge_sources(sources: Sequence[ConfigSource]) -> Mapping[str, str]:
    """Merge *sources* so that earlier entries shadow later ones."""

    merged: dict[str, str] = {}
    for source in reversed(sources):
        merged.update(source.values)
    return MappingProxyType(merged)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def load_settings(
    environ: Mapping[str, str] | None = None,
    env_file: str | os.PathLike[str] | None = None,
) -> Settings:
    """Evaluate every configuration source once and freeze the result."""

    if environ is None:
        environ = os.environ
    values = merge_sources(config_sources(environ, env_file))

    strict_raw = values.get("JSON_STRICT")
    return Settings(
        port=resolve_port(values.get("PORT")),
        host=values.get("HOST") or DEFAULT_HOST,
        log_level=values.get("LOG_LEVEL", "INFO"),
        auth_routes=values.get("AUTH_ROUTES") or None,
        protected_routes=values.get("PROTECTED_ROUTES") or None,
        json_limit=_resolve_limit(values.get("JSON_BODY_LIMIT")),
        json_strict=True if strict_raw is None else _truthy(strict_raw),
        values=values,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:  # noqa: D401 – public accessor
    """Return the process-wide :class:`Settings`, loaded on first use."""

    return load_settings()


__all__ = [
    "ConfigSource",
    "Settings",
    "config_sources",
    "get_settings",
    "load_settings",
    "merge_sources",
    "resolve_port",
]
