"""Router: resolves one request to exactly one handler invocation.

Candidates are scanned in registration order and the first matching
pattern wins. There is no best-match ranking: register specific routes
before general ones.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from wren.errors import MethodNotAllowed, RouteNotFound
from wren.routing.matcher import match_path, normalize_path
from wren.routing.registry import HandlerRegistry
from wren.routing.route import METHODS, MatchResult, Route
from wren.routing.table import RouteTable

if TYPE_CHECKING:
    from wren.context import RequestContext

logger = logging.getLogger("wren.routing")


class Router:
    """Front-controller dispatch over a ``RouteTable``.

    Usage::

        router = Router(table, registry)
        route, match = router.resolve("GET", "/user/21/name/johnjoe")
        result = router.dispatch(ctx)  # calls handler(ctx, "21", "johnjoe")
    """

    __slots__ = ("_registry", "_table")

    def __init__(self, table: RouteTable, registry: HandlerRegistry) -> None:
        self._table = table
        self._registry = registry

    @property
    def table(self) -> RouteTable:
        return self._table

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    def resolve(self, method: str, path: str) -> tuple[Route, MatchResult]:
        """Find the first route matching *method* and *path*.

        Raises ``MethodNotAllowed`` for verbs no route can be registered
        with, and ``RouteNotFound`` when the scan finds nothing.
        """
        verb = method.upper()
        if verb not in METHODS:
            raise MethodNotAllowed(METHODS)

        canonical = normalize_path(path)
        for route in self._table.routes_for(verb):
            result = match_path(normalize_path(route.pattern), canonical)
            if result:
                return route, result

        raise RouteNotFound(f"No route matches {verb} {path!r}")

    def dispatch(self, ctx: RequestContext) -> Any:
        """Resolve the context's request and call the bound handler.

        The handler receives the context followed by the captured path
        values as positional arguments.
        """
        request = ctx.request
        route, result = self.resolve(request.method, request.path)
        handler = self._registry.resolve(route.handler_ref)
        logger.debug(
            "%s %s -> %s %r", request.method, request.path, route.handler_ref, result.params
        )
        ctx.route = route
        ctx.params = result.params
        return handler(ctx, *result.params)
