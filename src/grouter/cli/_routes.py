"""``grouter routes``: print the compiled route table."""

import argparse
import sys

from grouter.cli._resolve import resolve_app
from grouter.errors import ConfigurationError
from grouter.routing.route import RouteEntry
from grouter.routing.router import Router


def _name(obj: object) -> str:
    return getattr(obj, "__qualname__", None) or type(obj).__name__


def format_routes(routes: list[RouteEntry]) -> str:
    """Render METHOD, PATH, HANDLER and MIDDLEWARE columns."""
    rows = [
        (
            ", ".join(sorted(m or "*" for m in entry.methods)),
            entry.path,
            _name(entry.handler),
            " > ".join(_name(mw) for mw in entry.middleware) or "-",
        )
        for entry in sorted(routes, key=lambda e: (e.path, sorted(e.methods)))
    ]
    header = ("METHOD", "PATH", "HANDLER", "MIDDLEWARE")
    widths = [max(len(row[i]) for row in [header, *rows]) for i in range(3)]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"
    lines = [fmt.format(*header), "-" * min(sum(widths) + 6 + len(header[3]), 80)]
    lines.extend(fmt.format(*row) for row in rows)
    return "\n".join(lines)


def run_routes(args: argparse.Namespace) -> None:
    """List every compiled route of the resolved app (``*`` means any method)."""
    try:
        app = resolve_app(args.app)
        dispatcher = app.compile() if isinstance(app, Router) else app
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = dispatcher.routes
    if not routes:
        print("No routes registered.")
        return
    print(format_routes(routes))

