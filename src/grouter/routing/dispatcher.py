"""Dispatcher: the frozen, compiled form of a Router tree.

The only component that touches raw ASGI on the serving path. Converts
scope dicts to Request objects, looks the route up in the frozen table,
runs the route's composed middleware chain, and sends the Response back.
"""

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from grouter._internal.asgi import Receive, Scope, Send
from grouter.config import RouterConfig
from grouter.errors import HTTPError
from grouter.http.request import Request
from grouter.http.response import Response
from grouter.routing.route import RouteEntry, RouteMatch
from grouter.routing.table import RouteTable
from grouter.server.errors import handle_http_error, handle_internal_error
from grouter.server.sender import send_response

logger = logging.getLogger("grouter.server")


class Dispatcher:
    """An immutable ASGI application produced by ``Router.compile()``.

    Safe to share between any number of threads and tasks: nothing on
    the request path writes to it. Pass it straight to an ASGI server,
    or call ``dispatch()`` in process.
    """

    __slots__ = ("_config", "_error_handlers", "_table")

    def __init__(
        self,
        table: RouteTable,
        *,
        error_handlers: Mapping[int | type, Callable[..., Any]] | None = None,
        config: RouterConfig | None = None,
    ) -> None:
        if not table.compiled:
            table.compile()
        self._table = table
        self._error_handlers = MappingProxyType(dict(error_handlers or {}))
        self._config = config or RouterConfig()

    def __repr__(self) -> str:
        return f"<Dispatcher routes={len(self.routes)}>"

    @property
    def config(self) -> RouterConfig:
        """The root router's configuration, fixed at compile time."""
        return self._config

    @property
    def routes(self) -> list[RouteEntry]:
        """Every compiled route entry."""
        return self._table.routes

    def match(self, method: str, path: str) -> RouteMatch:
        """Look up the entry for *method* and *path*.

        Raises ``NotFound`` or ``MethodNotAllowed`` like a real request would.
        """
        return self._table.match(method, path)

    async def dispatch(self, request: Request) -> Response:
        """Route *request* through its middleware chain and handler.

        Never raises: HTTP errors and unexpected exceptions become
        responses through the registered error handlers.
        """
        try:
            match = self._table.match(request.method, request.path)
            request = request.with_path_params(match.path_params)
            return await match.entry.endpoint(request)
        except HTTPError as exc:
            return await handle_http_error(
                exc, request, self._error_handlers, debug=self.config.debug
            )
        except Exception as exc:
            return await handle_internal_error(
                exc, request, self._error_handlers, debug=self.config.debug
            )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            logger.debug("Ignoring unsupported ASGI scope %r", scope["type"])
            return

        request = Request.from_asgi(scope, receive)
        response = await self.dispatch(request)
        await send_response(response, send, include_body=request.method != "HEAD")

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Acknowledge lifespan startup and shutdown.

        The routes are already compiled, so there is nothing to set up.
        """
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                logger.debug("Dispatcher ready with %d routes", len(self.routes))
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
