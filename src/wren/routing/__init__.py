"""Routing: ordered route table, segment matching, explicit handler registry.

Routes are registered during setup; the table is frozen when the app
freezes and scanned in registration order on every request.
"""

from wren.routing.matcher import match_path, normalize_path, placeholders
from wren.routing.registry import HandlerRegistry
from wren.routing.route import METHODS, MatchResult, Route
from wren.routing.router import Router
from wren.routing.table import RouteTable

__all__ = [
    "METHODS",
    "HandlerRegistry",
    "MatchResult",
    "Route",
    "RouteTable",
    "Router",
    "match_path",
    "normalize_path",
    "placeholders",
]
