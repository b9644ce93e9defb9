"""Compiled route table with trie-based path matching.

Plays the part of a pattern-matching dispatcher: entries are keyed by
``(method, path shape)``, added while the router compiles, then frozen.
"""

import logging
import re
from dataclasses import dataclass

from grouter.errors import DuplicateRouteError, MethodNotAllowed, NotFound
from grouter.routing.params import CONVERTERS
from grouter.routing.route import ANY_METHOD, RouteEntry, RouteMatch

logger = logging.getLogger("grouter.routing")


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all", "children", "entries", "params")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter children keyed by converter, in CONVERTERS priority order
        self.params: dict[str, _ParamEdge] = {}
        # Catch-all child (``{rest...}``), consumes the remaining path
        self.catch_all: _TrieNode | None = None
        # Entries at this node, keyed by HTTP method ("" = any method)
        self.entries: dict[str, RouteEntry] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    regex: re.Pattern[str]
    node: _TrieNode


class RouteTable:
    """Trie of compiled routes.

    Usage::

        table = RouteTable()
        table.add(route.freeze())
        table.compile()
        match = table.match("GET", "/users/42")

    Lookup priority per segment is static, then typed parameter
    (``int`` before ``float`` before ``str``), then catch-all, with
    backtracking when a branch dead-ends.
    """

    __slots__ = ("_allow_overrides", "_compiled", "_head_from_get", "_root")

    def __init__(self, *, allow_overrides: bool = False, head_from_get: bool = True) -> None:
        self._root = _TrieNode()
        self._compiled = False
        self._allow_overrides = allow_overrides
        self._head_from_get = head_from_get

    def add(self, entry: RouteEntry) -> None:
        """Register *entry* under each of its methods. Must precede compile().

        Raises ``DuplicateRouteError`` when a method is already taken on
        the same path shape, unless overrides are allowed.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        for seg in entry.segments:
            if seg.is_param and seg.param_type == "path":
                if node.catch_all is None:
                    node.catch_all = _TrieNode()
                node = node.catch_all
                break
            if seg.is_param:
                edge = node.params.get(seg.param_type)
                if edge is None:
                    pattern, _ = CONVERTERS[seg.param_type]
                    edge = _ParamEdge(regex=re.compile(f"^{pattern}$"), node=_TrieNode())
                    node.params[seg.param_type] = edge
                    node.params = {
                        name: node.params[name] for name in CONVERTERS if name in node.params
                    }
                node = edge.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        for method in sorted(entry.methods):
            existing = node.entries.get(method)
            if existing is not None:
                if not self._allow_overrides:
                    raise DuplicateRouteError(method, entry.path, existing.path)
                logger.warning(
                    "Route %s %r overrides %r", method or "<any>", entry.path, existing.path
                )
            node.entries[method] = entry

    def compile(self) -> None:
        """Freeze the table. No more routes can be added."""
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    @property
    def routes(self) -> list[RouteEntry]:
        """Every distinct entry, depth-first in registration-ish order."""
        seen: set[int] = set()
        result: list[RouteEntry] = []
        self._collect(self._root, seen, result)
        return result

    def _collect(self, node: _TrieNode, seen: set[int], result: list[RouteEntry]) -> None:
        for entry in node.entries.values():
            if id(entry) not in seen:
                seen.add(id(entry))
                result.append(entry)
        for child in node.children.values():
            self._collect(child, seen, result)
        for edge in node.params.values():
            self._collect(edge.node, seen, result)
        if node.catch_all is not None:
            self._collect(node.catch_all, seen, result)

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request against the table.

        A path-matching node that cannot serve *method* does not end the
        search; lookup backtracks to the next candidate, so
        ``POST /users/me`` never hides ``GET /users/{id}``.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but no entry
        serves the method; ``Allow`` lists every matching entry's methods.
        """
        parts = [part for part in path.split("/") if part]
        rejected: list[_TrieNode] = []
        found = self._match_node(self._root, parts, 0, (), method.upper(), rejected)
        if found is None:
            if rejected:
                allowed = frozenset().union(*(self._allowed(node.entries) for node in rejected))
                raise MethodNotAllowed(allowed)
            raise NotFound(f"No route matches {method} {path!r}")

        entry, values = found
        return RouteMatch(entry=entry, path_params=entry.bind(values))

    def _select(self, entries: dict[str, RouteEntry], method: str) -> RouteEntry | None:
        entry = entries.get(method)
        if entry is None and method == "HEAD" and self._head_from_get:
            entry = entries.get("GET")
        if entry is None:
            entry = entries.get(ANY_METHOD)
        return entry

    def _allowed(self, entries: dict[str, RouteEntry]) -> frozenset[str]:
        allowed = set(entries)
        if self._head_from_get and "GET" in allowed:
            allowed.add("HEAD")
        return frozenset(allowed)

    def _accept(
        self,
        node: _TrieNode,
        values: tuple[str, ...],
        method: str,
        rejected: list[_TrieNode],
    ) -> tuple[RouteEntry, tuple[str, ...]] | None:
        """Entry at a path-matching *node* for *method*, if it has one."""
        if not node.entries:
            return None
        entry = self._select(node.entries, method)
        if entry is None:
            rejected.append(node)
            return None
        return entry, values

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        values: tuple[str, ...],
        method: str,
        rejected: list[_TrieNode],
    ) -> tuple[RouteEntry, tuple[str, ...]] | None:
        """Recursively match path parts and method against the trie."""
        if index == len(parts):
            result = self._accept(node, values, method, rejected)
            if result is not None:
                return result
            # ``/files/{rest...}`` also matches ``/files`` with an empty capture
            if node.catch_all is not None:
                return self._accept(node.catch_all, (*values, ""), method, rejected)
            return None

        part = parts[index]

        child = node.children.get(part)
        if child is not None:
            result = self._match_node(child, parts, index + 1, values, method, rejected)
            if result is not None:
                return result

        for edge in node.params.values():
            if edge.regex.match(part):
                result = self._match_node(
                    edge.node, parts, index + 1, (*values, part), method, rejected
                )
                if result is not None:
                    return result

        if node.catch_all is not None:
            remainder = "/".join(parts[index:])
            return self._accept(node.catch_all, (*values, remainder), method, rejected)

        return None
