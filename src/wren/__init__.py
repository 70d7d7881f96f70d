"""Wren: a small MVC web framework for server-rendered sites.

A front controller resolves each request to a controller action through
a hand-rolled router; actions use a fluent SQL query builder, validate
form input, and render kida views.

Basic usage::

    from wren import App, AppConfig, Controller

    class PagesController(Controller):
        def home(self, ctx):
            return self.view("pages.home")

        def user(self, ctx, user_id, name):
            return self.view("pages.user", user_id=user_id, name=name)

    app = App(AppConfig(secret_key="change-me"))
    app.controller(PagesController)
    app.load_routes([
        ("GET", "/", "PagesController@home"),
        ("GET", "/user/{id}/name/{name}", "PagesController@user"),
    ])

Serve ``app`` with any ASGI server.

Data access::

    from wren.data import Database, QueryBuilder

    db = Database("sqlite:///app.db")
    with db.connection() as conn:
        QueryBuilder(conn, "users").find(5)
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BadRequest",
    "ConfigurationError",
    "Controller",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Redirect",
    "Request",
    "RequestContext",
    "Response",
    "View",
    "WrenError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Controller":
        from wren.controller import Controller

        return Controller

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from wren.http import response as _resp

        return getattr(_resp, name)

    if name == "View":
        from wren.views import View

        return View

    if name == "RequestContext":
        from wren.context import RequestContext

        return RequestContext

    if name in ("Middleware", "Next"):
        from wren import middleware as _mw

        return getattr(_mw, name)

    if name in (
        "WrenError",
        "BadRequest",
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
