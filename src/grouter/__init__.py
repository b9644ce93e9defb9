"""grouter: fluent HTTP route declaration compiled into one ASGI dispatcher.

Declare a tree of routers, attach middleware at any level, and compile
once into an immutable ASGI application::

    from grouter import Router

    router = Router("/")

    @router.get("/ping").do_func
    def ping():
        return "pong"

    api = router.add_sub_router("api")
    api.add_middlewares(require_token)
    api.get("/users/{id:int}").do(show_user)

    app = router.compile()   # hand this to any ASGI server
"""

__version__ = "0.1.0"
__all__ = [
    "ANY_METHOD",
    "ConfigurationError",
    "Dispatcher",
    "DuplicateRouteError",
    "GrouterError",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "Route",
    "Router",
    "RouterConfig",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import grouter`` cheap while providing a flat top-level API.
    """
    if name == "Router":
        from grouter.routing.router import Router

        return Router

    if name in ("Route", "ANY_METHOD"):
        from grouter.routing import route as _route

        return getattr(_route, name)

    if name == "Dispatcher":
        from grouter.routing.dispatcher import Dispatcher

        return Dispatcher

    if name == "RouterConfig":
        from grouter.config import RouterConfig

        return RouterConfig

    if name == "Request":
        from grouter.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from grouter.http import response as _resp

        return getattr(_resp, name)

    if name in ("Middleware", "Next"):
        from grouter.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in (
        "ConfigurationError",
        "DuplicateRouteError",
        "GrouterError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
    ):
        from grouter import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
