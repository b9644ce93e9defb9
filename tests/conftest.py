"""Shared fixtures for grouter tests."""

from collections.abc import Callable
from typing import Any

import pytest

from grouter.http.request import Request


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Build a Request straight from ASGI pieces, bypassing the dispatcher."""

    def factory(
        method: str = "GET",
        path: str = "/",
        *,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        query_string: bytes = b"",
    ) -> Request:
        chunks = [body]

        async def receive() -> dict[str, Any]:
            if chunks:
                return {"type": "http.request", "body": chunks.pop(), "more_body": False}
            return {"type": "http.disconnect"}

        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string,
            "headers": [
                (k.lower().encode("latin-1"), v.encode("latin-1"))
                for k, v in (headers or {}).items()
            ],
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 1234),
        }
        return Request.from_asgi(scope, receive)

    return factory
