"""Content negotiation: maps handler return values to ``Response`` objects.

isinstance-based dispatch, no magic, fully predictable.
"""

from __future__ import annotations

import json as json_module
from typing import TYPE_CHECKING, Any

from wren.errors import ConfigurationError
from wren.http.response import Redirect, Response
from wren.views import View, ViewRenderer

if TYPE_CHECKING:
    from wren.context import RequestContext


def negotiate(
    value: Any,
    *,
    renderer: ViewRenderer | None = None,
    ctx: RequestContext | None = None,
) -> Response:
    """Convert a handler's return value to a Response.

    Dispatch order:

    1. ``Response``            -> pass through
    2. ``Redirect``            -> 3xx with Location header
    3. ``View``                -> render via kida -> text/html
    4. ``str``                 -> 200, text/html
    5. ``bytes``               -> 200, application/octet-stream
    6. ``dict`` / ``list``     -> 200, application/json
    7. ``None``                -> 204, empty
    8. ``(value, int)``        -> negotiate value, override status
    9. ``(value, int, dict)``  -> negotiate value, override status + headers
    """
    match value:
        case Response():
            return value
        case Redirect():
            return value.to_response()
        case View():
            if renderer is None:
                msg = "View return values need a view renderer. Is the app frozen?"
                raise ConfigurationError(msg)
            return Response(body=renderer.render(value, ctx))
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json; charset=utf-8",
            )
        case None:
            return Response(body="", status=204)
        case (inner, int() as status):
            return negotiate(inner, renderer=renderer, ctx=ctx).with_status(status)
        case (inner, int() as status, dict() as headers):
            return (
                negotiate(inner, renderer=renderer, ctx=ctx)
                .with_status(status)
                .with_headers(headers)
            )
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                f"Return str, dict, list, bytes, View, Response, or Redirect."
            )
            raise TypeError(msg)
