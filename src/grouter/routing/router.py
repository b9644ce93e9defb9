"""Router: fluent builder for a tree of path-prefixed routes.

Mutable while routes, sub-routers, and middleware are declared.
Compiled exactly once, on first ``compile()`` or first request, into an
immutable ``Dispatcher``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from grouter._internal.asgi import Receive, Scope, Send
from grouter._internal.types import ErrorHandler
from grouter.config import RouterConfig
from grouter.middleware.protocol import Middleware
from grouter.routing.dispatcher import Dispatcher
from grouter.routing.paths import ROOT, join_path
from grouter.routing.route import ANY_METHOD, Route
from grouter.routing.table import RouteTable

logger = logging.getLogger("grouter.routing")


class Router:
    """A node in the route tree.

    Middleware declared on a router wraps every route beneath it,
    including routes of its sub-routers. For a request the order is::

        root middleware -> ... -> owning router middleware
            -> route middleware -> handler

    and within each list the first-added middleware runs outermost.

    Usage::

        router = Router("/", RequestLogger())
        router.get("/ping").do(lambda: "pong")

        api = router.add_sub_router("api")
        api.add_middlewares(require_token)
        api.post("/items").with_middleware(validate).do(create_item)

        app = router.compile()  # ASGI app

    Thread safety:
        Building the tree is single-threaded and unsynchronised.
        ``compile()`` uses a Lock + double-check so exactly one thread
        builds the dispatcher; concurrent callers block, then all get
        the same object. Later changes to the tree are not picked up.
    """

    __slots__ = (
        "_compile_lock",
        "_dispatcher",
        "_error_handlers",
        "_parent",
        "config",
        "middlewares",
        "path_prefix",
        "routes",
        "sub_routers",
    )

    def __init__(
        self,
        path_prefix: str = ROOT,
        *middlewares: Middleware,
        config: RouterConfig | None = None,
    ) -> None:
        self.path_prefix = join_path(path_prefix or ROOT, "")
        self.middlewares: list[Middleware] = list(middlewares)
        self.routes: list[Route] = []
        self.sub_routers: list[Router] = []
        self.config: RouterConfig = config or RouterConfig()
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._dispatcher: Dispatcher | None = None
        self._parent: Router | None = None
        self._compile_lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"<Router {self.path_prefix!r} routes={len(self.routes)} "
            f"sub_routers={len(self.sub_routers)}>"
        )

    # -- Tree building --

    def add_middlewares(self, *middlewares: Middleware) -> Router:
        """Append router-level middleware. Returns self for chaining."""
        self._warn_if_compiled("add_middlewares")
        self.middlewares.extend(middlewares)
        return self

    def add_sub_router(self, path: str) -> Router:
        """Create a child router mounted at ``path`` under this prefix."""
        self._warn_if_compiled("add_sub_router")
        child = Router(join_path(self.path_prefix, path))
        child._parent = self
        self.sub_routers.append(child)
        return child

    def add_route(self, path: str, *methods: str) -> Route:
        """Create a route for ``path`` under this prefix.

        With no methods the route answers any method.
        """
        self._warn_if_compiled("add_route")
        route = Route(join_path(self.path_prefix, path), methods, router=self)
        self.routes.append(route)
        return route

    def get(self, path: str) -> Route:
        return self.add_route(path, "GET")

    def post(self, path: str) -> Route:
        return self.add_route(path, "POST")

    def put(self, path: str) -> Route:
        return self.add_route(path, "PUT")

    def patch(self, path: str) -> Route:
        return self.add_route(path, "PATCH")

    def delete(self, path: str) -> Route:
        return self.add_route(path, "DELETE")

    def head(self, path: str) -> Route:
        return self.add_route(path, "HEAD")

    def options(self, path: str) -> Route:
        return self.add_route(path, "OPTIONS")

    def get_head(self, path: str) -> Route:
        """A route answering both GET and HEAD."""
        return self.add_route(path, "GET", "HEAD")

    def any(self, path: str) -> Route:
        """A route answering every HTTP method."""
        return self.add_route(path, ANY_METHOD)

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator.

        Only handlers on the router that is compiled are used; handlers
        on sub-routers are ignored by an ancestor's dispatcher::

            @router.error(404)
            def not_found(request):
                return {"error": "not found", "path": request.path}, 404
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._warn_if_compiled("error")
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Compilation --

    @property
    def compiled(self) -> bool:
        return self._dispatcher is not None

    def compile(self) -> Dispatcher:
        """Return the dispatcher, building it on the first call.

        Raises ``ConfigurationError`` (e.g. ``DuplicateRouteError``) if the
        tree is invalid; the router then stays uncompiled.
        """
        dispatcher = self._dispatcher
        if dispatcher is not None:
            return dispatcher
        with self._compile_lock:
            if self._dispatcher is None:
                self._dispatcher = self._build()
            return self._dispatcher

    def _build(self) -> Dispatcher:
        """Flatten the tree into one table. MUST hold _compile_lock."""
        table = RouteTable(
            allow_overrides=self.config.allow_route_overrides,
            head_from_get=self.config.head_from_get,
        )
        self._collect(table, ())
        table.compile()
        dispatcher = Dispatcher(table, error_handlers=self._error_handlers, config=self.config)
        logger.debug("Compiled %r into %d routes", self, len(dispatcher.routes))
        return dispatcher

    def _collect(self, table: RouteTable, inherited: tuple[Middleware, ...]) -> None:
        chain = (*inherited, *self.middlewares)
        for route in self.routes:
            if route.handler is None:
                logger.debug("Skipping %r: no handler assigned", route)
                continue
            table.add(route.freeze(chain))
        for sub_router in self.sub_routers:
            sub_router._collect(table, chain)

    def _compiled_ancestor(self) -> Router | None:
        """This router or the nearest ancestor that has compiled, if any."""
        router: Router | None = self
        while router is not None:
            if router._dispatcher is not None:
                return router
            router = router._parent
        return None

    def _warn_if_compiled(self, operation: str, target: object | None = None) -> None:
        """Log when a change to *target* (default: self) cannot reach a dispatcher."""
        compiled = self._compiled_ancestor()
        if compiled is not None:
            logger.warning(
                "%s() on %r after %r compiled has no effect on the compiled dispatcher",
                operation,
                self if target is None else target,
                compiled,
            )

    # -- Serving --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI entry point: compile on first use, then delegate."""
        await self.compile()(scope, receive, send)

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Compile and serve with uvicorn (``pip install grouter[server]``)."""
        from grouter.server.dev import run_server

        run_server(
            self.compile(),
            host or self.config.host,
            port or self.config.port,
            log_level=self.config.log_level,
        )

