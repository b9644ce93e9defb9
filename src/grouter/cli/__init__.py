"""grouter CLI: inspect and serve route trees.

Entry point registered as ``grouter`` in ``pyproject.toml``::

    [project.scripts]
    grouter = "grouter.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``grouter`` command."""
    parser = argparse.ArgumentParser(
        prog="grouter",
        description="grouter: fluent HTTP routes compiled into one ASGI dispatcher.",
    )
    subparsers = parser.add_subparsers(dest="command")

    routes_parser = subparsers.add_parser("routes", help="List compiled routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:router)")

    run_parser = subparsers.add_parser("run", help="Serve a router with uvicorn")
    run_parser.add_argument("app", help="Import string (e.g. myapp:router)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from grouter.cli._routes import run_routes

        run_routes(args)
    elif args.command == "run":
        from grouter.cli._run import run_app

        run_app(args)
