"""Custom middleware: function and class middleware at router and route level.

Demonstrates:
- Function middleware (adds X-Request-Id)
- Class middleware (rate limiter, 5 req/min per client, 429 when exceeded)
- Built-in ``Timing`` middleware on a single route
- threading.Lock for shared state across worker threads

Run:
    cd examples/custom_middleware && python app.py
"""

import itertools
import threading
import time

from grouter import Request, Response, Router
from grouter.middleware import Next, Timing

_ids = itertools.count(1)


async def request_id(request: Request, next: Next) -> Response:
    """Tag every response with a sequential request id."""
    response = await next(request)
    return response.with_header("X-Request-Id", str(next_id()))


def next_id() -> int:
    return next(_ids)


class RateLimiter:
    """Per-client rate limiter. Returns 429 when the limit is exceeded."""

    def __init__(self, max_requests: int, window: float) -> None:
        self.max_requests = max_requests
        self.window = window
        self._hits: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    async def __call__(self, request: Request, next: Next) -> Response:
        client = request.headers.get("x-forwarded-for", "127.0.0.1").split(",")[0].strip()

        with self._lock:
            now = time.monotonic()
            hits = self._hits.setdefault(client, [])
            hits[:] = [t for t in hits if now - t < self.window]
            if len(hits) >= self.max_requests:
                return Response("Too Many Requests", status=429)
            hits.append(now)

        return await next(request)


# request_id wraps the rate limiter, so even 429s get an id
router = Router("/", request_id, RateLimiter(max_requests=5, window=60.0))

router.get("/").do(lambda: "Hello from custom middleware!")
router.get("/slow").with_middleware(Timing()).do(lambda: "done")


if __name__ == "__main__":
    router.run()
