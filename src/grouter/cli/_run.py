"""``grouter run``: serve a router or dispatcher with uvicorn."""

import argparse
import sys

from grouter.cli._resolve import resolve_app
from grouter.config import RouterConfig
from grouter.errors import ConfigurationError
from grouter.routing.router import Router
from grouter.server.dev import run_server


def run_app(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it; CLI flags override config."""
    try:
        app = resolve_app(args.app)
        dispatcher = app.compile() if isinstance(app, Router) else app
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    config: RouterConfig = dispatcher.config
    run_server(
        dispatcher,
        args.host or config.host,
        args.port or config.port,
        log_level=config.log_level,
    )
