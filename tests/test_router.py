"""Tests for perch.routing.router — compiled trie-based router."""

import pytest

from perch.errors import ConfigurationError, MethodNotAllowed, NotFound
from perch.http.response import Response
from perch.routing.mount import StripPrefix
from perch.routing.route import Route
from perch.routing.router import Router, mount_pattern, parse_path


def _handler(request: object) -> Response:
    return Response("ok")


def _route(path: str, methods: frozenset[str] | None = frozenset({"GET"})) -> Route:
    return Route(path=path, handler=_handler, methods=methods)


class TestParsePath:
    def test_static(self) -> None:
        segments = parse_path("/users")
        assert len(segments) == 1
        assert segments[0].value == "users"
        assert segments[0].is_param is False

    def test_multi_static(self) -> None:
        segments = parse_path("/api/v2/users")
        assert [s.value for s in segments] == ["api", "v2", "users"]

    def test_param(self) -> None:
        segments = parse_path("/users/{id}")
        assert len(segments) == 2
        assert segments[1].is_param is True
        assert segments[1].param_name == "id"
        assert segments[1].catch_all is False

    def test_catch_all(self) -> None:
        segments = parse_path("/web/*")
        assert segments[1].catch_all is True
        assert segments[1].param_name == "*"

    def test_root(self) -> None:
        assert parse_path("/") == []

    def test_rejects_flask_style_param(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_path("/share/<slug>")
        assert "<param>" in str(exc_info.value)
        assert "{param}" in str(exc_info.value)


class TestMountPattern:
    def test_prefix(self) -> None:
        assert mount_pattern("/web") == "/web/*"

    def test_root(self) -> None:
        assert mount_pattern("/") == "/*"

    def test_trailing_slash(self) -> None:
        assert mount_pattern("/web/") == "/web/*"


class TestRouterStaticRoutes:
    def test_root(self) -> None:
        r = Router()
        r.add(_route("/"))
        r.compile()

        match = r.match("GET", "/")
        assert match.path_params == {}

    def test_nested_path(self) -> None:
        r = Router()
        r.add(_route("/multi/part/route"))
        r.compile()

        match = r.match("GET", "/multi/part/route")
        assert match.route.path == "/multi/part/route"

    @pytest.mark.parametrize("path", ["/other/", "/other/1234/", "//other/1234", "/other//1234"])
    def test_extra_slashes_not_found(self, path: str) -> None:
        r = Router()
        r.add(_route("/other"))
        r.add(_route("/other/{id}"))
        r.compile()

        with pytest.raises(NotFound):
            r.match("GET", path)

    def test_not_found(self) -> None:
        r = Router()
        r.add(_route("/other"))
        r.compile()

        with pytest.raises(NotFound):
            r.match("GET", "/missing")

    def test_prefix_of_route_is_not_a_match(self) -> None:
        r = Router()
        r.add(_route("/multi/part"))
        r.compile()

        with pytest.raises(NotFound):
            r.match("GET", "/multi")


class TestRouterParams:
    def test_param_captured(self) -> None:
        r = Router()
        r.add(_route("/other/{id}"))
        r.compile()

        match = r.match("GET", "/other/1234")
        assert match.path_params == {"id": "1234"}

    def test_root_param(self) -> None:
        r = Router()
        r.add(_route("/{id}"))
        r.compile()

        assert r.match("GET", "/abc").path_params == {"id": "abc"}

    def test_static_beats_param(self) -> None:
        r = Router()
        r.add(_route("/other/{name}"))
        r.add(_route("/other/json"))
        r.compile()

        assert r.match("GET", "/other/json").route.path == "/other/json"
        assert r.match("GET", "/other/bob").path_params == {"name": "bob"}

    def test_param_does_not_span_segments(self) -> None:
        r = Router()
        r.add(_route("/other/{id}"))
        r.compile()

        with pytest.raises(NotFound):
            r.match("GET", "/other/1/2")

    def test_conflicting_param_names(self) -> None:
        r = Router()
        r.add(_route("/other/{id}"))
        with pytest.raises(ConfigurationError, match="Conflicting parameter names"):
            r.add(_route("/other/{name}"))

    def test_same_param_name_different_verbs(self) -> None:
        r = Router()
        r.add(_route("/user/{id}", frozenset({"GET"})))
        r.add(_route("/user/{id}", frozenset({"DELETE"})))
        r.compile()

        assert r.match("DELETE", "/user/7").path_params == {"id": "7"}


class TestRouterMethods:
    def test_method_not_allowed(self) -> None:
        r = Router()
        r.add(_route("/other", frozenset({"GET"})))
        r.compile()

        with pytest.raises(MethodNotAllowed) as exc_info:
            r.match("POST", "/other")
        assert dict(exc_info.value.headers)["Allow"] == "GET"

    def test_allow_lists_every_method(self) -> None:
        r = Router()
        r.add(_route("/other", frozenset({"GET"})))
        r.add(_route("/other", frozenset({"PUT"})))
        r.compile()

        with pytest.raises(MethodNotAllowed) as exc_info:
            r.match("POST", "/other")
        assert dict(exc_info.value.headers)["Allow"] == "GET, PUT"

    @pytest.mark.parametrize(
        "method",
        ["GET", "PUT", "POST", "PATCH", "DELETE", "TRACE", "CONNECT", "OPTIONS", "HEAD"],
    )
    def test_any_method_route(self, method: str) -> None:
        r = Router()
        r.add(_route("/", None))
        r.compile()

        assert r.match(method, "/").route.methods is None

    def test_specific_method_beats_any(self) -> None:
        specific = Route(path="/", handler=_handler, methods=frozenset({"GET"}), name="get")
        anything = Route(path="/", handler=_handler, methods=None, name="any")
        r = Router()
        r.add(anything)
        r.add(specific)
        r.compile()

        assert r.match("GET", "/").route.name == "get"
        assert r.match("POST", "/").route.name == "any"

    def test_any_method_replaces_earlier_specific(self) -> None:
        specific = Route(path="/", handler=_handler, methods=frozenset({"GET"}), name="get")
        anything = Route(path="/", handler=_handler, methods=None, name="any")
        r = Router()
        r.add(specific)
        r.add(anything)
        r.compile()

        assert r.match("GET", "/").route.name == "any"
        assert r.match("POST", "/").route.name == "any"
        assert r.routes == [anything]


class TestRouterMount:
    def test_mount_captures_remainder(self) -> None:
        r = Router()
        r.mount("/web", _handler)
        r.compile()

        match = r.match("GET", "/web/blah.txt")
        assert match.path_params == {"*": "blah.txt"}
        assert match.route.mount is True
        assert isinstance(match.route.handler, StripPrefix)

    @pytest.mark.parametrize(
        "method",
        ["GET", "PUT", "POST", "PATCH", "DELETE", "TRACE", "CONNECT", "OPTIONS", "HEAD"],
    )
    def test_mount_matches_every_method(self, method: str) -> None:
        r = Router()
        r.mount("/web", _handler)
        r.compile()

        assert r.match(method, "/web/blah.txt").path_params == {"*": "blah.txt"}

    def test_mount_deep_remainder(self) -> None:
        r = Router()
        r.mount("/web", _handler)
        r.compile()

        assert r.match("GET", "/web/css/site.css").path_params == {"*": "css/site.css"}

    def test_mount_matches_bare_prefix(self) -> None:
        r = Router()
        r.mount("/web", _handler)
        r.compile()

        assert r.match("GET", "/web").path_params == {"*": ""}

    def test_mount_trailing_slash(self) -> None:
        r = Router()
        r.mount("/web", _handler)
        r.compile()

        assert r.match("GET", "/web/").path_params == {"*": ""}
        assert r.match("GET", "/web/css/").path_params == {"*": "css/"}

    def test_root_mount(self) -> None:
        r = Router()
        r.mount("/", _handler)
        r.compile()

        assert r.match("GET", "/anything/here").path_params == {"*": "anything/here"}

    def test_routes_beat_mount(self) -> None:
        r = Router()
        r.mount("/", _handler)
        r.add(_route("/other/{id}"))
        r.compile()

        assert r.match("GET", "/other/1").route.path == "/other/{id}"
        assert r.match("GET", "/else").route.path == "/*"

    def test_mount_returns_route(self) -> None:
        r = Router()
        route = r.mount("/web", _handler, name="MountWeb")
        assert route.path == "/web/*"
        assert route.name == "MountWeb"


class TestRouterPatterns:
    def test_patterns_deduplicated(self) -> None:
        r = Router()
        r.add(_route("/", frozenset({"GET"})))
        r.add(_route("/", frozenset({"POST"})))
        r.add(_route("/other/{id}"))
        r.mount("/web", _handler)
        r.compile()

        assert sorted(r.patterns) == ["/", "/other/{id}", "/web/*"]

    def test_routes_collects_unique(self) -> None:
        route = _route("/", frozenset({"GET", "POST"}))
        r = Router()
        r.add(route)
        r.compile()

        assert r.routes == [route]

    def test_empty(self) -> None:
        assert Router().patterns == []


class TestRouterCompile:
    def test_add_after_compile_raises(self) -> None:
        r = Router()
        r.compile()
        assert r.compiled is True

        with pytest.raises(RuntimeError):
            r.add(_route("/late"))
