"""Path joining and route path parsing."""

from dataclasses import dataclass

from grouter.errors import ConfigurationError
from grouter.routing.params import CONVERTERS

ROOT = "/"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:    ``users``        (is_param=False)
    Param:     ``{id}``         (param_name="id", param_type="str")
    Typed:     ``{id:int}``     (param_name="id", param_type="int")
    Catch-all: ``{rest...}``    (param_name="rest", param_type="path")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


def join_path(prefix: str, path: str) -> str:
    """Join a router prefix and a route path with exactly one ``/``.

    A root prefix contributes nothing, repeated separators collapse,
    and trailing slashes are dropped (except for the root itself)::

        join_path("/", "/ping")      -> "/ping"
        join_path("/a/", "/b/")      -> "/a/b"
        join_path("/api", "")        -> "/api"
        join_path("", "")            -> "/"
    """
    parts = [part for part in f"{prefix}/{path}".split("/") if part]
    return ROOT + "/".join(parts)


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"             -> [PathSegment("users")]
        "/users/{id:int}"    -> [PathSegment("users"), PathSegment("{id:int}", True, "id", "int")]
        "/static/{file...}"  -> [PathSegment("static"), PathSegment("{file...}", True, "file", "path")]

    Raises ``ConfigurationError`` for ``<param>`` syntax, unknown
    converters, repeated parameter names, and catch-alls that are not
    the final segment.
    """
    parts = [part for part in path.split("/") if part]
    segments: list[PathSegment] = []
    seen: set[str] = set()

    for position, part in enumerate(parts):
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route {path!r} uses <param> syntax. "
                f"grouter expects {{param}}, e.g. {{{part[1:-1]}}}."
            )
            raise ConfigurationError(msg)

        if not (part.startswith("{") and part.endswith("}")):
            segments.append(PathSegment(value=part))
            continue

        inner = part[1:-1]
        if inner.endswith("..."):
            name, param_type = inner[:-3], "path"
        else:
            name, _, param_type = inner.partition(":")
            param_type = param_type or "str"

        if not name.isidentifier():
            msg = f"Route {path!r}: parameter name {name!r} is not a valid identifier."
            raise ConfigurationError(msg)
        if param_type not in CONVERTERS:
            known = ", ".join(sorted(CONVERTERS))
            msg = f"Route {path!r}: unknown converter {param_type!r} (known: {known})."
            raise ConfigurationError(msg)
        if name in seen:
            msg = f"Route {path!r}: parameter {name!r} appears more than once."
            raise ConfigurationError(msg)
        if param_type == "path" and position != len(parts) - 1:
            msg = f"Route {path!r}: catch-all {part!r} must be the last segment."
            raise ConfigurationError(msg)

        seen.add(name)
        segments.append(
            PathSegment(value=part, is_param=True, param_name=name, param_type=param_type)
        )

    return segments
