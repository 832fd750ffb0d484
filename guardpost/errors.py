"""Exception hierarchy shared by the bootstrap and the request middleware."""

from __future__ import annotations


class GuardpostError(RuntimeError):
    """Base class for every error raised by guardpost itself."""


class ConfigurationError(GuardpostError):
    """Raised when configuration cannot be turned into a runnable server."""


class BindError(GuardpostError):
    """Raised when the listening socket cannot be bound."""

    def __init__(self, host: str, port: int, reason: str) -> None:
        super().__init__(f"Cannot listen on {host}:{port}: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


class MalformedRequestBody(GuardpostError):
    """A request body the JSON middleware refuses to hand to a route."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
