"""CSRF protection: session-backed tokens checked on state-changing requests.

Requires ``SessionMiddleware``; the token is stored in the session.

Usage::

    from wren.security import CSRFConfig, CSRFMiddleware
    from wren.sessions import SessionConfig, SessionMiddleware

    app.add_middleware(SessionMiddleware(SessionConfig(secret_key="...")))
    app.add_middleware(CSRFMiddleware(CSRFConfig()))

Views::

    <form method="post">
        {{ csrf_field() }}
        ...
    </form>
"""

import html
import secrets
from dataclasses import dataclass

from kida.utils.html import Markup

from wren.context import RequestContext
from wren.errors import ConfigurationError, HTTPError
from wren.http.response import Response
from wren.middleware import Next
from wren.sessions import Session

# Methods that mutate state and need CSRF protection
_UNSAFE_METHODS: frozenset[str] = frozenset({"POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True, slots=True)
class CSRFConfig:
    """CSRF middleware configuration.

    Attributes:
        field_name: Form field carrying the token.
        header_name: Header carrying the token for scripted requests.
        session_key: Session key holding the expected token.
        token_length: Random bytes per token (hex-encoded, so twice as many characters).
        rotate: Issue a fresh token after every accepted submission.
        exempt_paths: Paths that skip validation (e.g. webhooks).
    """

    field_name: str = "csrf_token"
    header_name: str = "X-CSRF-Token"
    session_key: str = "csrf_token"
    token_length: int = 32
    rotate: bool = False
    exempt_paths: frozenset[str] = frozenset()


def generate_token(session: Session, config: CSRFConfig | None = None) -> str:
    """Store a new random token in *session* and return it."""
    cfg = config or CSRFConfig()
    token = secrets.token_hex(cfg.token_length)
    session.set(cfg.session_key, token)
    return token


def match_token(session: Session, submitted: str | None, config: CSRFConfig | None = None) -> bool:
    """Compare *submitted* against the session token in constant time.

    With ``rotate`` set, a matching token is consumed.
    """
    cfg = config or CSRFConfig()
    expected = session.get(cfg.session_key)
    if not expected or not submitted:
        return False
    if not secrets.compare_digest(str(submitted), str(expected)):
        return False
    if cfg.rotate:
        session.unset(cfg.session_key)
    return True


def csrf_field(token: str, field_name: str = "csrf_token") -> Markup:
    """A hidden input carrying *token*."""
    return Markup(
        f'<input type="hidden" name="{html.escape(field_name)}" value="{html.escape(token)}">'
    )


class CSRFMiddleware:
    """Token-based CSRF protection middleware.

    On every request the session token is loaded (or generated) and
    exposed as ``ctx.csrf_token``. On POST, PUT, PATCH and DELETE the
    submitted token, from the header or the form body, must match;
    otherwise the request is rejected with 403.
    """

    __slots__ = ("_config",)

    def __init__(self, config: CSRFConfig | None = None) -> None:
        self._config = config or CSRFConfig()

    @property
    def config(self) -> CSRFConfig:
        return self._config

    def __call__(self, ctx: RequestContext, next: Next) -> Response:
        if not ctx.has_session:
            msg = (
                "CSRFMiddleware requires SessionMiddleware. "
                "Add SessionMiddleware before CSRFMiddleware."
            )
            raise ConfigurationError(msg)

        cfg = self._config
        session = ctx.session
        request = ctx.request

        if request.method in _UNSAFE_METHODS and request.path not in cfg.exempt_paths:
            submitted = request.headers.get(cfg.header_name) or request.form.get(cfg.field_name)
            if not submitted:
                raise HTTPError(status=403, detail="CSRF token missing")
            if not match_token(session, submitted, cfg):
                raise HTTPError(status=403, detail="CSRF token invalid")

        token = session.get(cfg.session_key) or generate_token(session, cfg)
        ctx.csrf_token = token
        ctx.state["csrf_field_name"] = cfg.field_name
        return next(ctx)
