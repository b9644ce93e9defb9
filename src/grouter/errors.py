"""Grouter exception hierarchy.

Shared across the route table, Router, Dispatcher, and middleware so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class GrouterError(Exception):
    """Base for all grouter-specific errors."""


class ConfigurationError(GrouterError):
    """Raised when a route tree is misconfigured.

    Surfaces at build time, typically from ``Router.compile()`` or
    ``parse_path()``, never while serving requests.
    """


class DuplicateRouteError(ConfigurationError):
    """Two routes claim the same method on the same path shape."""

    def __init__(self, method: str, path: str, existing: str) -> None:
        label = method or "<any>"
        super().__init__(
            f"Duplicate route {label} {path!r} (already registered as {existing!r}). "
            "Pass RouterConfig(allow_route_overrides=True) to let the last one win."
        )
        self.method = method
        self.path = path
        self.existing = existing


@dataclass(frozen=True, slots=True)
class HTTPError(GrouterError):
    """An error that maps directly to an HTTP status code.

    Raised by the route table, middleware, or handlers. The dispatcher
    catches these and hands them to the matching ``@router.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404, no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405, the path exists but not for this HTTP method.

    Carries an ``Allow`` header listing the registered methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=detail or f"Method not allowed. Allowed methods: {allow_value}",
            headers=(("Allow", allow_value),),
        )
