"""Router configuration.

RouterConfig is a frozen dataclass: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Configuration for a root Router. Immutable after creation.

    Only the router that is compiled reads its config; sub-routers
    created with ``add_sub_router()`` never carry one. Override what
    you need::

        config = RouterConfig(debug=True, allow_route_overrides=True)
    """

    # Server (used by Router.run() and ``grouter run``)
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"

    # Error responses include tracebacks and full detail
    debug: bool = False

    # Duplicate (method, path) registrations: error (default) or last-wins
    allow_route_overrides: bool = False

    # A GET route also answers HEAD unless an explicit HEAD route exists
    head_from_get: bool = True
