"""Route builder, compiled RouteEntry, and RouteMatch."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from grouter._internal.types import Handler
from grouter.middleware.protocol import Middleware, Next, compose
from grouter.routing.paths import PathSegment, parse_path
from grouter.server.handler import make_endpoint

if TYPE_CHECKING:
    from grouter.routing.router import Router

# Method token meaning "any method"
ANY_METHOD = ""

F = TypeVar("F", bound=Callable[..., Any])


def normalize_methods(methods: Sequence[str]) -> tuple[str, ...]:
    """Upper-case and de-duplicate method tokens, keeping their order.

    No methods at all means the route answers any method.
    """
    if not methods:
        return (ANY_METHOD,)
    return tuple(dict.fromkeys(m.strip().upper() for m in methods))


class Route:
    """A route under construction.

    Created by ``Router.add_route()`` (or a shorthand like ``get()``)
    with its path already prefixed. Configure it fluently::

        router.get("/users/{id:int}").with_middleware(auth).do(show_user)

    A route without a handler is skipped when the router compiles.
    """

    __slots__ = ("_router", "handler", "methods", "middlewares", "path")

    def __init__(
        self, path: str, methods: Sequence[str] = (), *, router: Router | None = None
    ) -> None:
        self.path = path
        self._router = router
        self.methods = normalize_methods(methods)
        self.handler: Handler | None = None
        self.middlewares: tuple[Middleware, ...] = ()

    def __repr__(self) -> str:
        methods = ",".join(m or "*" for m in self.methods)
        return f"<Route {methods} {self.path}>"

    def with_middleware(self, *middlewares: Middleware) -> Route:
        """Set the route-local middleware, replacing any earlier list.

        The first middleware given runs outermost; the last one wraps
        closest to the handler.
        """
        self._warn_if_compiled("with_middleware")
        self.middlewares = middlewares
        return self

    def do(self, handler: Handler) -> None:
        """Assign the terminal handler, overwriting any previous one.

        *handler* may be a function or any callable object, sync or async.
        """
        self._warn_if_compiled("do")
        self.handler = handler

    def do_func(self, func: F) -> F:
        """Assign a plain function as the terminal handler.

        Returns *func* unchanged, so it doubles as a decorator::

            @router.get("/ping").do_func
            def ping():
                return "pong"
        """
        self.do(func)
        return func

    def _warn_if_compiled(self, operation: str) -> None:
        if self._router is not None:
            self._router._warn_if_compiled(operation, self)

    def freeze(self, inherited: Sequence[Middleware] = ()) -> RouteEntry:
        """Compile into a RouteEntry.

        *inherited* is the router middleware collected from the root
        down to the owning router; route-local middleware goes inside it.
        """
        if self.handler is None:
            msg = f"{self!r} has no handler"
            raise ValueError(msg)
        segments = tuple(parse_path(self.path))
        chain = (*inherited, *self.middlewares)
        endpoint = compose(make_endpoint(self.handler, segments), chain)
        return RouteEntry(
            path=self.path,
            methods=frozenset(self.methods),
            handler=self.handler,
            middleware=chain,
            segments=segments,
            endpoint=endpoint,
        )


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """A frozen, compiled route.

    ``endpoint`` is the handler wrapped in the full middleware chain,
    ready to be awaited with a ``Request``.
    """

    path: str
    methods: frozenset[str]
    handler: Handler
    middleware: tuple[Middleware, ...]
    segments: tuple[PathSegment, ...]
    endpoint: Next

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(seg.param_name for seg in self.segments if seg.is_param and seg.param_name)

    def bind(self, values: Sequence[str]) -> dict[str, str]:
        """Name positional captures from the route table after this entry's parameters."""
        return dict(zip(self.param_names, values, strict=True))


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route table lookup."""

    entry: RouteEntry
    path_params: Mapping[str, str]
