"""Compiled router with trie-based path matching.

Routes are registered while ``bootstrap()`` runs and the router is
compiled before the ``Server`` is returned. Matching order at every
level is static segment, then ``{param}``, then a mount's catch-all.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TypeAlias

from perch._internal.types import Handler
from perch.errors import ConfigurationError, MethodNotAllowed, NotFound
from perch.routing.mount import StripPrefix
from perch.routing.route import CATCH_ALL, PathSegment, Route, RouteMatch

# routes_by_method key for routes registered without a method filter
_ANY = "*"

_PARAM_RE = re.compile(r"^[^/]+$")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/"             -> []
        "/users"        -> [PathSegment("users")]
        "/users/{id}"   -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/web/*"        -> [PathSegment("web"), PathSegment("*", catch_all=True, ...)]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = f"Route {path!r} uses <param> syntax; perch patterns use {{param}}."
            raise ConfigurationError(msg)
        if part == CATCH_ALL:
            segments.append(
                PathSegment(value=part, is_param=True, param_name=CATCH_ALL, catch_all=True)
            )
        elif part.startswith("{") and part.endswith("}"):
            segments.append(PathSegment(value=part, is_param=True, param_name=part[1:-1]))
        else:
            segments.append(PathSegment(value=part))
    return segments


def mount_pattern(prefix: str) -> str:
    """The pattern a mount at *prefix* is reported under (``/web/*``, ``/*``)."""
    return prefix.rstrip("/") + "/" + CATCH_ALL


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all_route", "children", "param_child", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (only one param name per level)
        self.param_child: _ParamEdge | None = None
        # Catch-all edge registered by a mount
        self.catch_all_route: _CatchAllEdge | None = None
        # Routes at this node, keyed by HTTP method (or "*" for any)
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all edge, consumes the remaining path."""

    param_name: str
    route_by_method: dict[str, Route]


def _register(table: dict[str, Route], route: Route) -> None:
    if route.methods is None:
        # Takes over every verb registered so far; later verbs override it again
        table.clear()
        table[_ANY] = route
        return
    for method in route.methods:
        table[method] = route


def _lookup(table: dict[str, Route], method: str) -> Route | None:
    route = table.get(method)
    if route is None:
        route = table.get(_ANY)
    return route


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(Route("/user/{id}", handler, frozenset({"GET"})))
        router.add(Route("/", other, None))           # any method
        router.mount("/web", FileServer("public"))    # /web/*
        router.compile()
        match = router.match("GET", "/user/42")
    """

    __slots__ = ("_compiled", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False

    @property
    def compiled(self) -> bool:
        return self._compiled

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root

        for seg in parse_path(route.path):
            if seg.catch_all:
                # Catch-all consumes the rest of the path, must be last
                if node.catch_all_route is None:
                    node.catch_all_route = _CatchAllEdge(
                        param_name=seg.param_name or CATCH_ALL,
                        route_by_method={},
                    )
                _register(node.catch_all_route.route_by_method, route)
                return

            if seg.is_param:
                if node.param_child is None:
                    node.param_child = _ParamEdge(
                        param_name=seg.param_name or "",
                        node=_TrieNode(),
                    )
                elif node.param_child.param_name != seg.param_name:
                    msg = (
                        f"Conflicting parameter names at {route.path!r}: "
                        f"{{{node.param_child.param_name}}} vs {seg.value}"
                    )
                    raise ConfigurationError(msg)
                node = node.param_child.node
            else:
                if seg.value not in node.children:
                    node.children[seg.value] = _TrieNode()
                node = node.children[seg.value]

        _register(node.routes_by_method, route)

    def mount(self, prefix: str, handler: Handler, *, name: str | None = None) -> Route:
        """Delegate every path under *prefix* to *handler*, for any method.

        The handler sees the request with *prefix* stripped from its path.
        The match also records the remainder under the ``"*"`` parameter.
        """
        route = Route(
            path=mount_pattern(prefix),
            handler=StripPrefix(prefix, handler),
            methods=None,
            name=name,
            mount=True,
        )
        self.add(route)
        return route

    def _nodes(self) -> Iterator[_TrieNode]:
        stack = [self._root]
        while stack:
            node = stack.pop()
            yield node
            if node.param_child is not None:
                stack.append(node.param_child.node)
            stack.extend(reversed(node.children.values()))

    @property
    def routes(self) -> list[Route]:
        """Every distinct Route in the trie, in depth-first order."""
        found: dict[int, Route] = {}
        for node in self._nodes():
            for route in node.routes_by_method.values():
                found.setdefault(id(route), route)
            if node.catch_all_route is not None:
                for route in node.catch_all_route.route_by_method.values():
                    found.setdefault(id(route), route)
        return list(found.values())

    @property
    def patterns(self) -> list[str]:
        """Registered path patterns, one entry per pattern however many verbs share it."""
        return list(dict.fromkeys(route.path for route in self.routes))

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Resolve *method* and *path* to a route.

        Raises:
            NotFound: No pattern matches *path*.
            MethodNotAllowed: A pattern matches but has no route for
                *method* and no any-method route.
        """
        parts = _split(path)
        found = _walk(self._root, parts, {})
        if found is None:
            raise NotFound(f"No route matches {method} {path!r}")

        table, params = found
        route = _lookup(table, method)
        if route is None:
            raise MethodNotAllowed(frozenset(table))
        return RouteMatch(route=route, path_params=params)


def _split(path: str) -> list[str]:
    # Empty parts are kept: "/other/1/" does not match "/other/{id}"
    if path in ("", "/"):
        return []
    return path.removeprefix("/").split("/")


_Found: TypeAlias = tuple[dict[str, Route], dict[str, str]]


def _walk(node: _TrieNode, parts: list[str], params: dict[str, str]) -> _Found | None:
    """Depth-first search: static child, then param child, then catch-all."""
    if not parts:
        if node.routes_by_method:
            return node.routes_by_method, params
        # A mount also answers its bare prefix, with an empty remainder
        if node.catch_all_route is not None:
            edge = node.catch_all_route
            return edge.route_by_method, {**params, edge.param_name: ""}
        return None

    head, rest = parts[0], parts[1:]

    child = node.children.get(head)
    if child is not None:
        found = _walk(child, rest, params)
        if found is not None:
            return found

    param = node.param_child
    if param is not None and _PARAM_RE.match(head):
        found = _walk(param.node, rest, {**params, param.param_name: head})
        if found is not None:
            return found

    if node.catch_all_route is not None:
        edge = node.catch_all_route
        return edge.route_by_method, {**params, edge.param_name: "/".join(parts)}

    return None
