"""Route storage grouped by HTTP method.

Registration order is match order. Re-registering a (method, pattern)
pair replaces the handler but keeps the route's original position.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from wren.errors import ConfigurationError, UnsupportedMethodKind
from wren.routing.route import METHODS, Route


def _check_method(method: str) -> str:
    verb = method.upper()
    if verb not in METHODS:
        raise UnsupportedMethodKind(method)
    return verb


class RouteTable:
    """Routes keyed by method, then by literal pattern.

    Usage::

        table = RouteTable()
        table.register("GET", "/user/{id}", "UsersController@show")
        for route in table.routes_for("GET"):
            ...
    """

    __slots__ = ("_frozen", "_routes")

    def __init__(self) -> None:
        self._routes: dict[str, dict[str, str]] = {method: {} for method in sorted(METHODS)}
        self._frozen = False

    @classmethod
    def from_triples(cls, triples: Iterable[tuple[str, str, str]]) -> RouteTable:
        """Build a table from ``(method, pattern, handler_ref)`` triples."""
        table = cls()
        for method, pattern, handler_ref in triples:
            table.register(method, pattern, handler_ref)
        return table

    def register(self, method: str, pattern: str, handler_ref: str) -> None:
        """Store a route. Raises ``UnsupportedMethodKind`` for unknown verbs."""
        if self._frozen:
            msg = "Cannot register routes after the route table is frozen."
            raise ConfigurationError(msg)
        self._routes[_check_method(method)][pattern] = handler_ref

    def routes_for(self, method: str) -> Iterator[Route]:
        """Yield the routes registered for *method*, in registration order."""
        verb = _check_method(method)
        for pattern, handler_ref in self._routes[verb].items():
            yield Route(method=verb, pattern=pattern, handler_ref=handler_ref)

    @property
    def routes(self) -> list[Route]:
        """Every registered route, grouped by method."""
        return [route for method in sorted(METHODS) for route in self.routes_for(method)]

    def freeze(self) -> None:
        """End the route-loading phase. No more routes can be added."""
        self._frozen = True

    def __len__(self) -> int:
        return sum(len(by_pattern) for by_pattern in self._routes.values())

    def __repr__(self) -> str:
        return f"<RouteTable {len(self)} routes>"
