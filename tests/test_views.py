"""Tests for view naming, rendering and the values every view sees."""

from pathlib import Path

import pytest

from wren import App, AppConfig, View
from wren.errors import ViewNotFound
from wren.security import CSRFMiddleware
from wren.sessions import SessionConfig, SessionMiddleware
from wren.testing import TestClient
from wren.views import ViewRenderer, create_environment, view_exists, view_path

SECRET = "test-secret-key-for-views"


def _write(root: Path, name: str, source: str) -> None:
    target = root / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(source)


def _renderer(root: Path, **options) -> ViewRenderer:
    config = AppConfig(view_dir=root, **options)
    return ViewRenderer(create_environment(config), config)


class TestViewPath:
    def test_dotted(self) -> None:
        assert view_path("users.show") == "users/show.html"

    def test_plain(self) -> None:
        assert view_path("home") == "home.html"

    def test_explicit_file(self) -> None:
        assert view_path("users/show.html") == "users/show.html"

    def test_view_path_property(self) -> None:
        assert View("pages.about").path == "pages/about.html"


class TestRender:
    def test_context(self, tmp_path) -> None:
        _write(tmp_path, "users/show.html", "<h1>{{ name }}</h1>")
        assert _renderer(tmp_path).render(View("users.show", name="Ann")) == "<h1>Ann</h1>"

    def test_autoescape(self, tmp_path) -> None:
        _write(tmp_path, "x.html", "{{ value }}")
        assert _renderer(tmp_path).render(View("x", value="<b>")) == "&lt;b&gt;"

    def test_missing(self, tmp_path) -> None:
        with pytest.raises(ViewNotFound, match="nope/missing.html"):
            _renderer(tmp_path).render(View("nope.missing"))

    def test_app_globals(self, tmp_path) -> None:
        _write(tmp_path, "g.html", "{{ app_name }} {{ url('/posts') }}")
        renderer = _renderer(tmp_path, app_name="Blog", app_url="https://blog.test/")
        assert renderer.render(View("g")) == "Blog https://blog.test/posts"

    def test_errors_empty_without_request(self, tmp_path) -> None:
        _write(tmp_path, "e.html", "{% if errors %}bad{% else %}ok{% end %}")
        assert _renderer(tmp_path).render(View("e")) == "ok"

    def test_error_view(self, tmp_path) -> None:
        _write(tmp_path, "errors/404.html", "Lost: {{ detail }} ({{ status }})")
        renderer = _renderer(tmp_path)
        assert renderer.render_error(404, "No page") == "Lost: No page (404)"
        assert renderer.render_error(500, "Boom") is None

    def test_view_exists(self, tmp_path) -> None:
        _write(tmp_path, "a/b.html", "")
        config = AppConfig(view_dir=tmp_path)
        assert view_exists(config, "a.b")
        assert not view_exists(config, "a.c")


class TestRequestValues:
    async def test_session_and_csrf_field(self, tmp_path) -> None:
        _write(
            tmp_path,
            "form.html",
            '<form method="post">{{ csrf_field() }}'
            '<input name="email" value="{{ old("email") }}"></form>',
        )
        app = App(AppConfig(secret_key=SECRET, view_dir=tmp_path))
        app.add_middleware(SessionMiddleware(SessionConfig(secret_key=SECRET)))
        app.add_middleware(CSRFMiddleware())

        @app.get("/form")
        def form(ctx):
            return View("form")

        async with TestClient(app) as client:
            html = (await client.get("/form")).text
            assert '<input type="hidden" name="csrf_token" value="' in html
            assert 'name="email" value=""' in html

    async def test_view_global(self, tmp_path) -> None:
        _write(tmp_path, "g.html", "{{ shout('hi') }}")
        app = App(AppConfig(view_dir=tmp_path))

        @app.view_global()
        def shout(text):
            return text.upper()

        @app.get("/")
        def index(ctx):
            return View("g")

        async with TestClient(app) as client:
            assert (await client.get("/")).text == "HI"

    async def test_request_in_view(self, tmp_path) -> None:
        _write(tmp_path, "r.html", "{{ request.path }}")
        app = App(AppConfig(view_dir=tmp_path))

        @app.get("/where")
        def where(ctx):
            return View("r")

        async with TestClient(app) as client:
            assert (await client.get("/where")).text == "/where"
