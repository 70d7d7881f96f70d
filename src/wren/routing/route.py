"""Route and MatchResult frozen dataclasses."""

from dataclasses import dataclass

# Verbs a route may be registered for
METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "DELETE"})


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route.

    ``handler_ref`` is an opaque name (``"PagesController@about"`` or a
    function's qualified name) resolved through the handler registry at
    dispatch time, never at registration time.
    """

    method: str
    pattern: str
    handler_ref: str


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of matching one path against one route pattern.

    ``params`` holds the path segments captured by placeholders, in the
    order the placeholders appear in the pattern. Falsy when unmatched::

        result = match_path("user/{id}", "user/21")
        if result:
            handler(ctx, *result.params)
    """

    matched: bool
    params: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.matched


NO_MATCH = MatchResult(matched=False)
