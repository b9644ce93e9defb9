"""Middleware protocol, the Next alias, and chain composition.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The dispatcher checks the shape, not the lineage.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, TypeAlias

from grouter._internal.invoke import invoke
from grouter.http.request import Request
from grouter.http.response import Response

# The next handler in the chain
Next: TypeAlias = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for grouter middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")

        # Class middleware
        class RequireToken:
            async def __call__(self, request: Request, next: Next) -> Response:
                ...

        # Sync middleware, for short-circuits or handing back next(request)
        def maintenance(request: Request, next: Next):
            return Response("Down for maintenance", status=503)
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...


def compose(endpoint: Next, middleware: Sequence[Middleware]) -> Next:
    """Wrap *endpoint* in *middleware*, first element outermost.

    For ``[m1, m2, m3]`` a request passes through ``m1``, then ``m2``,
    then ``m3``, then reaches *endpoint*; responses unwind in reverse.
    Each middleware is called through ``invoke``, so a plain ``def``
    works too: whatever it returns is awaited if awaitable.
    """
    handler = endpoint
    for mw in reversed(middleware):

        async def link(request: Request, _mw: Middleware = mw, _next: Next = handler) -> Response:
            return await invoke(_mw, request, _next)

        handler = link
    return handler
