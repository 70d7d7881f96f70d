"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    def my_mw(ctx: RequestContext, next: Next) -> Response: ...

No base class required. Middleware runs on the request's worker
thread, like the handler, so it is plain synchronous code.
"""

from collections.abc import Callable
from typing import Protocol

from wren.context import RequestContext
from wren.http.response import Response

# The next handler in the middleware chain
type Next = Callable[[RequestContext], Response]


class Middleware(Protocol):
    """Protocol for wren middleware.

    Accepts both functions and callable objects::

        # Function middleware
        def timing(ctx: RequestContext, next: Next) -> Response:
            start = time.monotonic()
            response = next(ctx)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")

        # Class middleware
        class RequireJSON:
            def __call__(self, ctx: RequestContext, next: Next) -> Response:
                ...
    """

    def __call__(self, ctx: RequestContext, next: Next) -> Response: ...
