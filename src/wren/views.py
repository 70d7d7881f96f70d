"""View rendering with kida.

Handlers return a ``View``; the pipeline renders it with the app's kida
environment. View names are dotted paths under ``AppConfig.view_dir``::

    return View("users.show", user=user)    # views/users/show.html

Every view also sees the request-scoped values ``request``, ``session``,
``errors`` (a ``MessageBag`` left by a failed validation), ``old(name)``
(the previously submitted input) and ``csrf_field()``. App-wide globals
are ``app_name`` and ``url(path)``.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from kida import Environment, FileSystemLoader

from wren.config import AppConfig
from wren.errors import ViewNotFound
from wren.security.csrf import csrf_field
from wren.sessions import ERRORS_KEY
from wren.validation.result import MessageBag

if TYPE_CHECKING:
    from wren.context import RequestContext

VIEW_SUFFIX = ".html"


class View:
    """A view to render, by dotted name, with its context."""

    __slots__ = ("context", "name")

    def __init__(self, name: str, /, **context: Any) -> None:
        self.name = name
        self.context = context

    @property
    def path(self) -> str:
        return view_path(self.name)

    def __repr__(self) -> str:
        return f"View({self.name!r})"


def view_path(name: str) -> str:
    """``"users.show"`` -> ``"users/show.html"``. Names ending in ``.html`` are kept."""
    if name.endswith(VIEW_SUFFIX):
        return name
    return name.replace(".", "/") + VIEW_SUFFIX


def create_environment(
    config: AppConfig,
    globals_: dict[str, Any] | None = None,
) -> Environment:
    """Create the app's kida environment. Called once when the app freezes."""
    env = Environment(
        loader=FileSystemLoader(str(config.view_dir)),
        autoescape=True,
        auto_reload=config.debug,
    )
    base_url = config.app_url.rstrip("/")

    def url(path: str = "/") -> str:
        return f"{base_url}/{path.lstrip('/')}"

    env.add_global("app_name", config.app_name)
    env.add_global("url", url)
    for name, value in (globals_ or {}).items():
        env.add_global(name, value)
    return env


def view_exists(config: AppConfig, name: str) -> bool:
    return (Path(config.view_dir) / view_path(name)).is_file()


def request_context(ctx: RequestContext | None) -> dict[str, Any]:
    """Values every view sees for the current request."""
    if ctx is None:
        return {"errors": MessageBag(), "old": lambda name, default="": default}

    values: dict[str, Any] = {"request": ctx.request}
    if ctx.has_session:
        session = ctx.session
        values["session"] = session
        values["errors"] = MessageBag(session.get(ERRORS_KEY) or {})
        values["old"] = session.old
    else:
        values["errors"] = MessageBag()
        values["old"] = lambda name, default="": default

    token = ctx.csrf_token
    values["csrf_token"] = token or ""
    field_name = ctx.state.get("csrf_field_name", "csrf_token")
    values["csrf_field"] = (lambda: csrf_field(token, field_name)) if token else (lambda: "")
    return values


def render_view(
    env: Environment,
    config: AppConfig,
    view: View,
    ctx: RequestContext | None = None,
) -> str:
    """Render *view* to a string. Raises ``ViewNotFound`` for a missing file."""
    if not view_exists(config, view.name):
        msg = f"View {view.name!r} not found (looked for {view.path!r} in {str(config.view_dir)!r})"
        raise ViewNotFound(msg)
    template = env.get_template(view.path)
    return template.render({**request_context(ctx), **view.context})


def render_error_view(
    env: Environment,
    config: AppConfig,
    status: int,
    detail: str,
    ctx: RequestContext | None = None,
) -> str | None:
    """Render ``errors/<status>.html`` if the app has one, else ``None``."""
    name = f"errors.{status}"
    if not view_exists(config, name):
        return None
    return render_view(env, config, View(name, status=status, detail=detail), ctx)


class ViewRenderer:
    """The app's kida environment bound to its config."""

    __slots__ = ("config", "env")

    def __init__(self, env: Environment, config: AppConfig) -> None:
        self.env = env
        self.config = config

    def render(self, view: View, ctx: RequestContext | None = None) -> str:
        return render_view(self.env, self.config, view, ctx)

    def render_error(
        self, status: int, detail: str, ctx: RequestContext | None = None
    ) -> str | None:
        return render_error_view(self.env, self.config, status, detail, ctx)
