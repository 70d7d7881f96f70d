"""Signed cookie sessions.

Session data is serialized as JSON and signed with ``itsdangerous``;
it is readable by the client but cannot be forged. ``SessionMiddleware``
loads the cookie at the start of a request, attaches a ``Session`` to
the request context and writes it back on the response.

Flash values live for exactly one following request::

    ctx.session.flash("status", "Saved.")   # POST /posts
    ctx.session.get("status")               # GET /posts (after redirect) -> "Saved."
    ctx.session.get("status")               # next request -> None
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from itsdangerous import BadSignature, URLSafeTimedSerializer

from wren.context import RequestContext
from wren.errors import ConfigurationError
from wren.http.response import Response
from wren.middleware import Next

# Reserved session keys
FLASH_NEW_KEY = "_flash.new"
FLASH_OLD_KEY = "_flash.old"
OLD_INPUT_KEY = "_old_input"
PREVIOUS_URL_KEY = "_previous_url"
ERRORS_KEY = "errors"


class Session:
    """Key-value session data for one request."""

    __slots__ = ("_data", "destroyed", "modified")

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})
        self.modified = False
        self.destroyed = False

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.modified = True

    def has(self, key: str) -> bool:
        return key in self._data

    def unset(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self.modified = True

    def pull(self, key: str, default: Any = None) -> Any:
        """Return the value for *key* and remove it."""
        if key not in self._data:
            return default
        self.modified = True
        return self._data.pop(key)

    def flash(self, key: str, value: Any) -> None:
        """Set *key* for the rest of this request and the next one."""
        self.set(key, value)
        new = [k for k in self._data.get(FLASH_NEW_KEY, []) if k != key]
        new.append(key)
        self._data[FLASH_NEW_KEY] = new
        old = self._data.get(FLASH_OLD_KEY, [])
        if key in old:
            self._data[FLASH_OLD_KEY] = [k for k in old if k != key]

    def reflash(self) -> None:
        """Keep this request's flash values for one more request."""
        old = self._data.pop(FLASH_OLD_KEY, [])
        self._data[FLASH_NEW_KEY] = [*self._data.get(FLASH_NEW_KEY, []), *old]
        self.modified = True

    def destroy(self) -> None:
        """Drop all data; the cookie is expired on the response."""
        self._data.clear()
        self.destroyed = True
        self.modified = True

    def regenerate(self) -> None:
        """Drop all data but keep the session cookie (fresh signature)."""
        self._data.clear()
        self.modified = True

    # -- Request bookkeeping --

    def age_flash(self) -> None:
        """End-of-request step: drop last request's flash keys, age this one's."""
        for key in self._data.pop(FLASH_OLD_KEY, []):
            self._data.pop(key, None)
        new = self._data.pop(FLASH_NEW_KEY, [])
        if new:
            self._data[FLASH_OLD_KEY] = new
        self.modified = True

    @property
    def previous_url(self) -> str | None:
        return self._data.get(PREVIOUS_URL_KEY)

    def set_previous_url(self, url: str) -> None:
        self._data[PREVIOUS_URL_KEY] = url
        self.modified = True

    def flash_input(self, data: Mapping[str, Any]) -> None:
        """Keep submitted form input for re-populating the form next request."""
        self.flash(OLD_INPUT_KEY, dict(data))

    def old(self, key: str, default: Any = "") -> Any:
        """A value from the previous request's submitted input."""
        return self._data.get(OLD_INPUT_KEY, {}).get(key, default)

    # -- Mapping-ish access --

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def __repr__(self) -> str:
        return f"Session({self._data!r})"


# -- Configuration --


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` is required. Sessions are signed, not encrypted.
    """

    secret_key: str
    cookie_name: str = "wren_session"
    max_age: int = 86400  # 24 hours
    path: str = "/"
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, secret_key: str) -> SessionConfig:
        """Build from a ``session`` config section (``name`` is the cookie name)."""
        return cls(
            secret_key=secret_key,
            cookie_name=str(data.get("name", "wren_session")),
            max_age=int(data.get("max_age", 86400)),
            secure=bool(data.get("secure", False)),
        )


# -- Middleware --


class SessionMiddleware:
    """Signed cookie session middleware.

    Usage::

        from wren.sessions import SessionConfig, SessionMiddleware

        app.add_middleware(SessionMiddleware(SessionConfig(secret_key="...")))

    After a successful GET, the request URL is remembered as the
    session's previous URL; ``ctx.back()`` redirects there.
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="wren.session")

    @property
    def config(self) -> SessionConfig:
        return self._config

    def load(self, cookie_value: str | None) -> Session:
        """Verify and decode a cookie value. Bad or expired cookies start a fresh session."""
        if not cookie_value:
            return Session()
        try:
            data = self._serializer.loads(cookie_value, max_age=self._config.max_age)
        except BadSignature:
            return Session()
        if not isinstance(data, dict):
            return Session()
        return Session(data)

    def dump(self, session: Session) -> str:
        return self._serializer.dumps(session.to_dict())

    def __call__(self, ctx: RequestContext, next: Next) -> Response:
        cfg = self._config
        session = self.load(ctx.request.cookies.get(cfg.cookie_name))
        ctx.attach_session(session)

        response = next(ctx)

        if ctx.request.is_get and 200 <= response.status < 300:
            session.set_previous_url(ctx.request.url)
        session.age_flash()

        if session.destroyed:
            return response.without_cookie(cfg.cookie_name, path=cfg.path)
        return response.with_cookie(
            cfg.cookie_name,
            self.dump(session),
            max_age=cfg.max_age,
            path=cfg.path,
            secure=cfg.secure,
            httponly=cfg.httponly,
            samesite=cfg.samesite,
        )
