"""Wren exception hierarchy.

Shared across the router, the app, the request pipeline and middleware so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when app configuration is invalid.

    Typically raised during setup or at ``App._freeze()``.
    """


class UnsupportedMethodKind(ConfigurationError):
    """A route was registered with a verb outside GET, POST, PUT, DELETE."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(
            f"Unsupported HTTP method {method!r}. Routes accept GET, POST, PUT or DELETE."
        )


class ViewNotFound(WrenError):  # noqa: N818
    """A handler referenced a view file that does not exist."""


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The request pipeline
    catches these and renders the matching error handler or error view.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: the requested resource does not exist."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class BadRequest(HTTPError):  # noqa: N818
    """400: the request body or headers could not be understood."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class RouteNotFound(NotFound):
    """404: no registered route matches the request method and path."""


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: the request used a verb the router does not serve.

    Includes an ``Allow`` header listing the verbs routes can use.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class HandlerNotFound(HTTPError):  # noqa: N818
    """500: a route references a controller or action that is not registered."""

    def __init__(self, handler_ref: str) -> None:
        super().__init__(status=500, detail=f"No handler registered for {handler_ref!r}")
