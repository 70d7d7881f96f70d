"""Per-request context.

One ``RequestContext`` is built for every request and passed explicitly
through middleware, the router and the handler. It carries the request,
the app config, the session (once session middleware has attached one)
and a database connection opened on first use.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from wren.errors import ConfigurationError

if TYPE_CHECKING:
    from wren.config import AppConfig
    from wren.data.connection import Connection
    from wren.data.database import Database
    from wren.http.request import Request
    from wren.routing.route import Route
    from wren.sessions import Session


class RequestContext:
    """Everything a handler needs about the current request.

    Handlers receive it as their first argument::

        def show(self, ctx, user_id):
            user = User.find(ctx.db, int(user_id))
            ctx.session.set("last_viewed", user_id)
            return self.view("users.show", user=user)
    """

    __slots__ = (
        "_connection",
        "_session",
        "config",
        "csrf_token",
        "database",
        "params",
        "request",
        "route",
        "state",
    )

    def __init__(
        self,
        request: Request,
        config: AppConfig,
        database: Database | None = None,
    ) -> None:
        self.request = request
        self.config = config
        self.database = database
        self.route: Route | None = None
        self.params: tuple[str, ...] = ()
        # Set by CSRFMiddleware
        self.csrf_token: str | None = None
        # Free-form per-request values for middleware and handlers
        self.state: dict[str, Any] = {}
        self._session: Session | None = None
        self._connection: Connection | None = None

    # -- Session --

    @property
    def session(self) -> Session:
        """The request's session.

        Raises ``LookupError`` when no session middleware is installed.
        """
        if self._session is None:
            msg = (
                "No active session. Ensure SessionMiddleware is added "
                "to the app before accessing the session."
            )
            raise LookupError(msg)
        return self._session

    @property
    def has_session(self) -> bool:
        return self._session is not None

    def attach_session(self, session: Session) -> None:
        self._session = session

    # -- Database --

    @property
    def db(self) -> Connection:
        """The request's database connection, opened on first access."""
        if self._connection is None:
            if self.database is None:
                msg = "No database configured. Pass AppConfig(database=...) or App(db=...)."
                raise ConfigurationError(msg)
            self._connection = self.database.connect()
        return self._connection

    @property
    def has_connection(self) -> bool:
        return self._connection is not None

    def close(self) -> None:
        """Release per-request resources. Safe to call more than once."""
        if self._connection is not None:
            connection, self._connection = self._connection, None
            connection.close()

    # -- Navigation --

    def back(self, default: str = "/") -> str:
        """The URL to send the user back to.

        The last successful GET recorded in the session, else the
        ``Referer`` header, else *default*.
        """
        if self._session is not None:
            previous = self._session.previous_url
            if previous:
                return previous
        return self.request.headers.get("referer") or default

    def __repr__(self) -> str:
        return f"<RequestContext {self.request.method} {self.request.path}>"
