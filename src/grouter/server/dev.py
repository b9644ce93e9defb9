"""Serve a compiled dispatcher with uvicorn.

uvicorn is an optional dependency (``pip install grouter[server]``);
it is imported only when a server is actually started.
"""

from collections.abc import Awaitable, Callable
from typing import TypeAlias

from grouter._internal.asgi import Receive, Scope, Send
from grouter.errors import ConfigurationError

ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]


def run_server(app: ASGIApp, host: str, port: int, *, log_level: str = "info") -> None:
    """Block serving *app* on *host*:*port* until interrupted.

    Raises ``ConfigurationError`` when uvicorn is not installed.
    """
    try:
        import uvicorn
    except ImportError as exc:
        msg = "Serving requires uvicorn. Install it with: pip install grouter[server]"
        raise ConfigurationError(msg) from exc

    uvicorn.run(app, host=host, port=port, log_level=log_level, lifespan="on")
