"""Tests for the route table, handler registry and router."""

import pytest

from wren.config import AppConfig
from wren.context import RequestContext
from wren.controller import Controller
from wren.errors import (
    ConfigurationError,
    HandlerNotFound,
    MethodNotAllowed,
    RouteNotFound,
    UnsupportedMethodKind,
)
from wren.http.request import Request
from wren.routing import HandlerRegistry, Router, RouteTable
from wren.routing.registry import function_ref
from wren.routing.route import Route


class UsersController(Controller):
    def show(self, ctx, user_id, name):
        return f"{user_id}:{name}"

    def index(self, ctx):
        return "index"

    def _helper(self):
        return "private"


def _ctx(method: str, path: str) -> RequestContext:
    return RequestContext(Request(method=method, path=path), AppConfig())


def _make_router(*triples: tuple[str, str, str]) -> Router:
    registry = HandlerRegistry()
    registry.register_controller(UsersController)
    return Router(RouteTable.from_triples(triples), registry)


# ---------------------------------------------------------------------------
# RouteTable
# ---------------------------------------------------------------------------


class TestRouteTable:
    def test_register_and_list(self) -> None:
        table = RouteTable()
        table.register("GET", "/users", "UsersController@index")
        assert list(table.routes_for("GET")) == [
            Route(method="GET", pattern="/users", handler_ref="UsersController@index")
        ]
        assert list(table.routes_for("POST")) == []

    def test_method_is_case_insensitive(self) -> None:
        table = RouteTable()
        table.register("get", "/a", "X@a")
        assert len(list(table.routes_for("GET"))) == 1

    def test_unsupported_method(self) -> None:
        table = RouteTable()
        with pytest.raises(UnsupportedMethodKind) as exc_info:
            table.register("PATCH", "/a", "X@a")
        assert exc_info.value.method == "PATCH"

    def test_reregister_replaces_handler_keeps_position(self) -> None:
        table = RouteTable()
        table.register("GET", "/a", "X@a")
        table.register("GET", "/b", "X@b")
        table.register("GET", "/a", "X@other")
        routes = list(table.routes_for("GET"))
        assert [r.pattern for r in routes] == ["/a", "/b"]
        assert routes[0].handler_ref == "X@other"

    def test_len(self) -> None:
        table = RouteTable.from_triples([("GET", "/a", "X@a"), ("POST", "/a", "X@b")])
        assert len(table) == 2

    def test_frozen_table_rejects_routes(self) -> None:
        table = RouteTable()
        table.freeze()
        with pytest.raises(ConfigurationError):
            table.register("GET", "/a", "X@a")


# ---------------------------------------------------------------------------
# HandlerRegistry
# ---------------------------------------------------------------------------


class TestHandlerRegistry:
    def test_controller_actions_registered(self) -> None:
        registry = HandlerRegistry()
        refs = registry.register_controller(UsersController)
        assert sorted(refs) == ["UsersController@index", "UsersController@show"]

    def test_private_and_base_methods_skipped(self) -> None:
        registry = HandlerRegistry()
        registry.register_controller(UsersController)
        assert "UsersController@_helper" not in registry
        assert "UsersController@view" not in registry
        assert "UsersController@redirect" not in registry

    def test_custom_name(self) -> None:
        registry = HandlerRegistry()
        registry.register_controller(UsersController, "Users")
        assert "Users@index" in registry

    def test_bound_action_gets_fresh_instance(self) -> None:
        registry = HandlerRegistry()
        registry.register_controller(UsersController)
        action = registry.resolve("UsersController@show")
        assert action(None, "1", "ann") == "1:ann"

    def test_duplicate_ref(self) -> None:
        registry = HandlerRegistry()
        registry.register("a", lambda ctx: None)
        with pytest.raises(ConfigurationError, match="already registered"):
            registry.register("a", lambda ctx: None)

    def test_resolve_unknown(self) -> None:
        with pytest.raises(HandlerNotFound) as exc_info:
            HandlerRegistry().resolve("Nope@missing")
        assert exc_info.value.status == 500

    def test_register_function(self) -> None:
        def about(ctx):
            return "about"

        registry = HandlerRegistry()
        ref = registry.register_function(about)
        assert ref == function_ref(about)
        assert registry.resolve(ref)(None) == "about"

    def test_register_same_function_twice(self) -> None:
        def about(ctx):
            return "about"

        registry = HandlerRegistry()
        assert registry.register_function(about) == registry.register_function(about)
        assert len(registry) == 1

    def test_closures_sharing_a_name(self) -> None:
        def page(text):
            def handler(ctx):
                return text

            return handler

        registry = HandlerRegistry()
        first = registry.register_function(page("a"))
        second = registry.register_function(page("b"))
        assert first != second
        assert second == f"{first}#2"
        assert registry.resolve(first)(None) == "a"
        assert registry.resolve(second)(None) == "b"

    def test_non_class_controller(self) -> None:
        with pytest.raises(ConfigurationError):
            HandlerRegistry().register_controller(UsersController())  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


class TestRouterResolve:
    def test_params_in_order(self) -> None:
        router = _make_router(("GET", "/user/{id}/name/{name}", "UsersController@show"))
        route, result = router.resolve("GET", "/user/21/name/johnjoe")
        assert route.handler_ref == "UsersController@show"
        assert result.params == ("21", "johnjoe")

    def test_trailing_slash_ignored(self) -> None:
        router = _make_router(("GET", "/users", "UsersController@index"))
        route, _ = router.resolve("GET", "/users/")
        assert route.pattern == "/users"

    def test_root(self) -> None:
        router = _make_router(("GET", "/", "UsersController@index"))
        route, result = router.resolve("GET", "/")
        assert route.pattern == "/"
        assert result.params == ()

    def test_first_registered_wins(self) -> None:
        router = _make_router(
            ("GET", "/user/{id}/name/{name}", "UsersController@show"),
            ("GET", "/user/me/name/{name}", "UsersController@index"),
        )
        route, _ = router.resolve("GET", "/user/me/name/ann")
        assert route.handler_ref == "UsersController@show"

    def test_missing_route(self) -> None:
        router = _make_router(("GET", "/users", "UsersController@index"))
        with pytest.raises(RouteNotFound) as exc_info:
            router.resolve("GET", "/missing")
        assert exc_info.value.status == 404

    def test_wrong_method_is_not_found(self) -> None:
        router = _make_router(("GET", "/users", "UsersController@index"))
        with pytest.raises(RouteNotFound):
            router.resolve("POST", "/users")

    def test_unknown_verb(self) -> None:
        router = _make_router(("GET", "/users", "UsersController@index"))
        with pytest.raises(MethodNotAllowed) as exc_info:
            router.resolve("PATCH", "/users")
        assert exc_info.value.status == 405
        assert ("Allow", "DELETE, GET, POST, PUT") in exc_info.value.headers


class TestRouterDispatch:
    def test_calls_handler_with_params(self) -> None:
        router = _make_router(("GET", "/user/{id}/name/{name}", "UsersController@show"))
        ctx = _ctx("GET", "/user/21/name/johnjoe")
        assert router.dispatch(ctx) == "21:johnjoe"
        assert ctx.params == ("21", "johnjoe")
        assert ctx.route is not None
        assert ctx.route.pattern == "/user/{id}/name/{name}"

    def test_unregistered_handler(self) -> None:
        router = _make_router(("GET", "/x", "GhostController@index"))
        with pytest.raises(HandlerNotFound):
            router.dispatch(_ctx("GET", "/x"))
