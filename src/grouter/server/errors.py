"""Error handling pipeline for dispatched requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers or plain-text defaults.
"""

import inspect
import logging
import traceback
from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

from grouter._internal.invoke import invoke
from grouter.errors import HTTPError
from grouter.http.request import Request
from grouter.http.response import Response
from grouter.server.negotiation import negotiate

logger = logging.getLogger("grouter.server")

ErrorHandlers: TypeAlias = Mapping[int | type, Callable[..., Any]]


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a registered error handler with as many arguments as it takes.

    Error handlers may accept zero, one (request), or two (request, exc)
    arguments and may be sync or async.
    """
    arity = len(inspect.signature(handler).parameters)
    args = (request, exc)[: min(arity, 2)]
    return negotiate(await invoke(handler, *args))


def _lookup(handlers: ErrorHandlers, exc: Exception, status: int) -> Callable[..., Any] | None:
    for exc_type in type(exc).__mro__:
        if exc_type in handlers:
            return handlers[exc_type]
    return handlers.get(status)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    handlers: ErrorHandlers,
    *,
    debug: bool = False,
) -> Response:
    """Map an HTTPError to a Response. Exception type wins over status code."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = _lookup(handlers, exc, exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Keep the error status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
    else:
        detail = exc.detail or f"Error {exc.status}"
        response = Response(body=str(exc) if debug else detail, status=exc.status)

    for name, value in exc.headers:
        if response.header(name) is None:
            response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    handlers: ErrorHandlers,
    *,
    debug: bool = False,
) -> Response:
    """Handle an unexpected exception as a 500."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = _lookup(handlers, exc, 500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        return response.with_status(500) if response.status == 200 else response

    if debug:
        body = "".join(traceback.format_exception(exc))
        return Response(body=body, status=500)
    return Response(body="Internal Server Error", status=500)
