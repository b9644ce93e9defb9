"""Middleware, protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    RequestLogger -- one log line per request with status and latency
    Timing -- X-Response-Time header
"""

from grouter.middleware.builtin import RequestLogger, Timing
from grouter.middleware.protocol import Middleware, Next, compose

__all__ = ["Middleware", "Next", "RequestLogger", "Timing", "compose"]
