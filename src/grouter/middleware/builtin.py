"""Built-in middleware: request logging and response timing."""

import logging
import time

from grouter.http.request import Request
from grouter.http.response import Response
from grouter.middleware.protocol import Next

logger = logging.getLogger("grouter.middleware")


class RequestLogger:
    """Log one line per request: method, path, status, elapsed time.

    Exceptions are logged and re-raised so the dispatcher still turns
    them into an error response::

        router = Router("/", RequestLogger())
    """

    __slots__ = ("level", "logger")

    def __init__(self, log: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.logger = log or logger
        self.level = level

    async def __call__(self, request: Request, next: Next) -> Response:
        start = time.perf_counter()
        try:
            response = await next(request)
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            self.logger.log(
                self.level, "%s %s raised after %.1fms", request.method, request.path, elapsed
            )
            raise
        elapsed = (time.perf_counter() - start) * 1000
        self.logger.log(
            self.level, "%s %s %d %.1fms", request.method, request.path, response.status, elapsed
        )
        return response


class Timing:
    """Add the handler's wall time (milliseconds) as a response header."""

    __slots__ = ("header",)

    def __init__(self, header: str = "X-Response-Time") -> None:
        self.header = header

    async def __call__(self, request: Request, next: Next) -> Response:
        start = time.perf_counter()
        response = await next(request)
        return response.with_header(self.header, f"{(time.perf_counter() - start) * 1000:.3f}")
