"""Adapt a user handler into an endpoint ``async (request) -> Response``.

The handler signature is inspected once, when the route is frozen, so
per-request work is a dict lookup per parameter.

Resolution order for each parameter:

1. ``request`` (by name or ``Request`` annotation)
2. Path parameters (by name), converted to the annotation when it is a
   plain type, otherwise to the route converter's type
3. Parameters with defaults are left alone
4. A single leftover leading positional parameter receives the request
   (so ``lambda r: ...`` works)
"""

import inspect
from collections.abc import Callable, Sequence
from typing import Any, TypeAlias

from grouter._internal.invoke import invoke
from grouter._internal.types import Handler
from grouter.errors import ConfigurationError
from grouter.http.request import Request
from grouter.http.response import Response
from grouter.middleware.protocol import Next
from grouter.routing.params import convert_param
from grouter.routing.paths import PathSegment
from grouter.server.negotiation import negotiate

# (parameter name, request -> argument value)
_Resolver: TypeAlias = tuple[str, Callable[[Request], Any]]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def make_endpoint(handler: Handler, segments: Sequence[PathSegment]) -> Next:
    """Build the innermost callable of a route's middleware chain."""
    plan = _plan_arguments(handler, segments)
    positional = [resolve for name, resolve in plan if name == ""]
    keyword = [(name, resolve) for name, resolve in plan if name]

    async def endpoint(request: Request) -> Response:
        args = [resolve(request) for resolve in positional]
        kwargs = {name: resolve(request) for name, resolve in keyword}
        result = await invoke(handler, *args, **kwargs)
        return negotiate(result)

    return endpoint


def _signature(handler: Handler) -> inspect.Signature:
    try:
        return inspect.signature(handler, eval_str=True)
    except NameError:
        # String annotations that cannot be resolved; names still work
        return inspect.signature(handler)


def _plan_arguments(handler: Handler, segments: Sequence[PathSegment]) -> list[_Resolver]:
    converters = {seg.param_name: seg.param_type for seg in segments if seg.is_param}
    plan: list[_Resolver] = []

    for index, (name, param) in enumerate(_signature(handler).parameters.items()):
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        if name == "request" or param.annotation is Request:
            resolver: Callable[[Request], Any] = _request
        elif name in converters:
            resolver = _path_param(name, converters[name], param.annotation)
        elif param.default is not inspect.Parameter.empty:
            continue
        elif index == 0 and param.kind in _POSITIONAL:
            resolver = _request
        else:
            msg = (
                f"Handler {getattr(handler, '__qualname__', handler)!r} needs argument {name!r}, "
                f"which is neither 'request' nor a path parameter ({', '.join(converters) or 'none'})."
            )
            raise ConfigurationError(msg)

        # Positional-only parameters cannot be passed by keyword
        key = "" if param.kind is inspect.Parameter.POSITIONAL_ONLY else name
        plan.append((key, resolver))

    return plan


def _request(request: Request) -> Request:
    return request


def _path_param(name: str, param_type: str, annotation: Any) -> Callable[[Request], Any]:
    def resolve(request: Request) -> Any:
        value = request.path_params[name]
        try:
            if annotation in (int, float, str):
                return annotation(value)
            return convert_param(value, param_type)
        except ValueError:
            return value

    return resolve
