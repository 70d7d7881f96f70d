"""Wren application class: the front controller.

Mutable during setup (routes, controllers, middleware, error handlers).
Frozen at runtime when ``__call__()`` or ``handle()`` is first invoked.
"""

import inspect
import threading
from collections.abc import Callable, Iterable
from typing import Any

import anyio.to_thread

from wren._internal.asgi import BodyTooLarge, Receive, Scope, Send, read_body
from wren._internal.types import ErrorHandler, Handler
from wren.config import AppConfig
from wren.data.database import Database
from wren.errors import ConfigurationError, HandlerNotFound
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware import Middleware
from wren.routing.registry import HandlerRegistry
from wren.routing.router import Router
from wren.routing.table import RouteTable
from wren.server.handler import handle_request
from wren.server.sender import send_response
from wren.views import ViewRenderer, create_environment


class App:
    """The wren application.

    Routes name their handlers by reference. Controllers are registered
    as classes and referenced as ``"Name@action"``; plain functions can
    be registered directly or with the verb decorators::

        app = App(AppConfig(secret_key="...", database=DatabaseConfig(name="app.db")))
        app.controller(PagesController)

        app.load_routes([
            ("GET", "/", "PagesController@home"),
            ("GET", "/user/{id}/name/{name}", "PagesController@user"),
        ])

        @app.post("/contact")
        def contact(ctx):
            ...

    Thread safety:
        Setup is single-threaded. The freeze transition uses a lock and a
        double check, so exactly one thread compiles the app even when
        the first requests arrive concurrently on worker threads.
    """

    __slots__ = (
        "_db",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_registry",
        "_renderer",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_table",
        "_view_globals",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        db: Database | str | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._table = RouteTable()
        self._registry = HandlerRegistry()
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._view_globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Database: an explicit instance or URL wins over config.database
        if isinstance(db, str):
            self._db: Database | None = Database(db)
        elif db is not None:
            self._db = db
        elif self.config.database is not None:
            self._db = Database(self.config.database)
        else:
            self._db = None

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._renderer: ViewRenderer | None = None

    # -- Route registration --

    def route(
        self,
        method: str,
        pattern: str,
        handler: str | Handler | None = None,
    ) -> Any:
        """Register a route.

        *handler* is a reference string (``"Name@action"``) or a function.
        Without *handler*, returns a decorator for a function.
        """
        self._check_not_frozen()
        if handler is None:

            def decorator(func: Handler) -> Handler:
                self._add_route(method, pattern, func)
                return func

            return decorator
        self._add_route(method, pattern, handler)
        return handler

    def get(self, pattern: str, handler: str | Handler | None = None) -> Any:
        return self.route("GET", pattern, handler)

    def post(self, pattern: str, handler: str | Handler | None = None) -> Any:
        return self.route("POST", pattern, handler)

    def put(self, pattern: str, handler: str | Handler | None = None) -> Any:
        return self.route("PUT", pattern, handler)

    def delete(self, pattern: str, handler: str | Handler | None = None) -> Any:
        return self.route("DELETE", pattern, handler)

    def load_routes(self, routes: Iterable[tuple[str, str, str]]) -> None:
        """Register ``(method, pattern, handler_ref)`` triples in order."""
        for method, pattern, ref in routes:
            self.route(method, pattern, ref)

    def controller(self, cls: type, name: str | None = None) -> type:
        """Register a controller's actions. Usable as a class decorator."""
        self._check_not_frozen()
        self._registry.register_controller(cls, name)
        return cls

    def _add_route(self, method: str, pattern: str, handler: str | Handler) -> None:
        if isinstance(handler, str):
            ref = handler
        elif callable(handler):
            ref = self._registry.register_function(handler)
        else:
            msg = f"Route handler must be a reference string or a callable, got {handler!r}."
            raise ConfigurationError(msg)
        self._table.register(method, pattern, ref)

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator::

            @app.error(404)
            def not_found(ctx):
                return View("errors.missing"), 404
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline. The first added runs outermost."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Views --

    def view_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida global available to every view."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._view_globals[name or func.__name__] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Introspection --

    @property
    def db(self) -> Database | None:
        return self._db

    @property
    def routes(self) -> RouteTable:
        return self._table

    @property
    def router(self) -> Router:
        """The compiled router. Freezes the app."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router

    # -- Request handling --

    def handle(self, request: Request) -> Response:
        """Run one request through the synchronous pipeline."""
        self._ensure_frozen()
        assert self._router is not None
        return handle_request(
            request,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            config=self.config,
            renderer=self._renderer,
            database=self._db,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly. HTTP requests have their
        body read here, then run through ``handle()`` on a worker thread.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        self._ensure_frozen()

        try:
            body = await read_body(receive, self.config.max_content_length)
        except BodyTooLarge:
            await send_response(Response(body="Payload Too Large", status=413), send)
            return

        request = Request.from_asgi(scope, body)
        # HEAD is answered by the GET route, without a body
        head = request.method == "HEAD"
        if head:
            request = Request.from_asgi({**scope, "method": "GET"}, body)

        response = await anyio.to_thread.run_sync(self.handle, request)
        await send_response(response, send, head=head)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup, so a broken route table fails the
        server start instead of the first request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Every route must point at a registered handler
        for route in self._table.routes:
            if route.handler_ref not in self._registry:
                raise HandlerNotFound(route.handler_ref)
        self._table.freeze()
        self._router = Router(self._table, self._registry)

        # 2. Capture middleware as an immutable tuple
        self._middleware = tuple(self._middleware_list)

        # 3. Views
        self._renderer = ViewRenderer(
            create_environment(self.config, self._view_globals),
            self.config,
        )

        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, controllers and middleware before the first request."
            )
            raise ConfigurationError(msg)
