"""Error handling pipeline for wren requests.

Maps ``HTTPError`` exceptions and unexpected failures to ``Response``
objects: a user-registered error handler first, then the app's
``errors/<status>.html`` view, then a plain-text body.
"""

import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from wren.context import RequestContext
from wren.errors import HTTPError
from wren.http.response import Response
from wren.server.negotiation import negotiate
from wren.views import ViewRenderer

logger = logging.getLogger("wren.server")


def call_error_handler(
    handler: Callable[..., Any],
    ctx: RequestContext,
    exc: Exception,
    renderer: ViewRenderer | None,
) -> Response:
    """Invoke a user-registered error handler.

    Error handlers may accept zero, one (ctx), or two (ctx, exc) args.
    """
    params = list(inspect.signature(handler).parameters.values())
    if len(params) >= 2:
        result = handler(ctx, exc)
    elif len(params) == 1:
        result = handler(ctx)
    else:
        result = handler()
    return negotiate(result, renderer=renderer, ctx=ctx)


def _default_error(
    status: int,
    detail: str,
    ctx: RequestContext,
    renderer: ViewRenderer | None,
) -> Response:
    if renderer is not None:
        html = renderer.render_error(status, detail, ctx)
        if html is not None:
            return Response(body=html, status=status)
    return Response(body=detail, status=status, content_type="text/plain; charset=utf-8")


def handle_http_error(
    exc: HTTPError,
    ctx: RequestContext,
    error_handlers: dict[int | type, Callable[..., Any]],
    renderer: ViewRenderer | None,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response."""
    request = ctx.request
    if exc.status >= 500:
        logger.error("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    else:
        logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = call_error_handler(handler, ctx, exc, renderer)
        # Keep the error status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
    else:
        detail = exc.detail or f"Error {exc.status}"
        if debug and exc.detail:
            detail = f"{exc.status}: {exc.detail}"
        response = _default_error(exc.status, detail, ctx, renderer)

    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(
    exc: Exception,
    ctx: RequestContext,
    error_handlers: dict[int | type, Callable[..., Any]],
    renderer: ViewRenderer | None,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    request = ctx.request
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        response = call_error_handler(handler, ctx, exc, renderer)
        return response.with_status(500) if response.status == 200 else response

    if debug:
        body = "".join(traceback.format_exception(exc))
        return Response(body=body, status=500, content_type="text/plain; charset=utf-8")

    return _default_error(500, "Internal Server Error", ctx, renderer)
