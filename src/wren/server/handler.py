"""The synchronous request pipeline.

Builds the per-request context, runs the middleware chain around router
dispatch and maps every outcome to a ``Response``. Runs on a worker
thread; the ASGI side lives in ``wren.app``.
"""

import logging
from collections.abc import Callable
from typing import Any

from wren.config import AppConfig
from wren.context import RequestContext
from wren.data.database import Database
from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Redirect, Response
from wren.middleware import Next
from wren.routing.router import Router
from wren.server.errors import handle_http_error, handle_internal_error
from wren.server.negotiation import negotiate
from wren.sessions import ERRORS_KEY
from wren.validation import ValidationFailed
from wren.views import ViewRenderer

logger = logging.getLogger("wren.server")

# Submitted fields never kept as old input
_SENSITIVE_FIELDS: tuple[str, ...] = ("password", "csrf_token")


def validation_redirect(ctx: RequestContext, exc: ValidationFailed) -> Response:
    """Answer a failed validation with a redirect back.

    The errors and the submitted input are flashed to the session so the
    form can show them on the next request.
    """
    logger.debug(
        "Validation failed %s %s: %s", ctx.request.method, ctx.request.path, list(exc.errors)
    )
    if ctx.has_session:
        session = ctx.session
        session.flash(ERRORS_KEY, exc.errors.to_dict())
        session.flash_input(
            {
                k: v
                for k, v in exc.data.items()
                if not any(s in k.lower() for s in _SENSITIVE_FIELDS)
            }
        )
    return Redirect(ctx.back()).to_response()


def handle_request(
    request: Request,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    config: AppConfig,
    renderer: ViewRenderer | None = None,
    database: Database | None = None,
) -> Response:
    """Process a single request through the full pipeline."""
    ctx = RequestContext(request, config, database)

    def dispatch(c: RequestContext) -> Response:
        # HTTP errors become responses here, so middleware still sees them
        try:
            result = router.dispatch(c)
        except ValidationFailed as exc:
            return validation_redirect(c, exc)
        except HTTPError as exc:
            return handle_http_error(exc, c, error_handlers, renderer, config.debug)
        return negotiate(result, renderer=renderer, ctx=c)

    # Wrap middleware around the dispatch
    handler: Next = dispatch
    for mw in reversed(middleware):

        def make_next(c: RequestContext, _mw: Any = mw, _next: Next = handler) -> Response:
            return _mw(c, _next)

        handler = make_next

    try:
        return handler(ctx)
    except HTTPError as exc:
        return handle_http_error(exc, ctx, error_handlers, renderer, config.debug)
    except Exception as exc:
        return handle_internal_error(exc, ctx, error_handlers, renderer, config.debug)
    finally:
        ctx.close()
