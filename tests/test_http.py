"""Tests for request, response, headers, query, cookie and form primitives."""

import pytest

from wren.http import (
    FormData,
    Headers,
    QueryParams,
    Redirect,
    Request,
    Response,
    SetCookie,
    UploadFile,
    parse_cookies,
    parse_form_data,
)
from wren.errors import BadRequest
from wren.testing import encode_multipart


def _request(
    method: str = "GET",
    path: str = "/",
    *,
    query: bytes = b"",
    body: bytes = b"",
    headers: list[tuple[bytes, bytes]] | None = None,
) -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": query,
        "headers": headers or [],
        "client": ("127.0.0.1", 5000),
    }
    return Request.from_asgi(scope, body)


# ---------------------------------------------------------------------------
# Headers / QueryParams / cookies
# ---------------------------------------------------------------------------


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers([(b"Content-Type", b"text/html")])
        assert headers["content-type"] == "text/html"
        assert headers["CONTENT-TYPE"] == "text/html"
        assert "Content-Type" in headers

    def test_multiple_values(self) -> None:
        headers = Headers([(b"accept", b"a"), (b"Accept", b"b")])
        assert headers["accept"] == "a"
        assert headers.get_list("ACCEPT") == ["a", "b"]

    def test_from_dict(self) -> None:
        assert Headers.from_dict({"X-Token": "1"}).get("x-token") == "1"


class TestQueryParams:
    def test_first_value(self) -> None:
        params = QueryParams(b"a=1&a=2&b=")
        assert params["a"] == "1"
        assert params.get_list("a") == ["1", "2"]
        assert params["b"] == ""

    def test_get_int(self) -> None:
        params = QueryParams("page=3&bad=x")
        assert params.get_int("page") == 3
        assert params.get_int("bad", 1) == 1
        assert params.get_int("missing") is None


class TestCookies:
    def test_parse(self) -> None:
        assert parse_cookies("a=1; b=2") == {"a": "1", "b": "2"}

    def test_malformed_pairs_skipped(self) -> None:
        assert parse_cookies("junk; =x; c=3") == {"c": "3"}

    def test_set_cookie_header(self) -> None:
        cookie = SetCookie("sid", "abc", max_age=60, secure=True)
        assert cookie.to_header_value() == (
            "sid=abc; Max-Age=60; Path=/; Secure; HttpOnly; SameSite=lax"
        )


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------


class TestForms:
    def test_urlencoded(self) -> None:
        form = parse_form_data(b"name=Ann&tag=a&tag=b", "application/x-www-form-urlencoded")
        assert form["name"] == "Ann"
        assert form.get_list("tag") == ["a", "b"]

    def test_other_content_type_is_empty(self) -> None:
        assert len(parse_form_data(b'{"a": 1}', "application/json")) == 0
        assert len(parse_form_data(b"a=1", None)) == 0

    def test_multipart(self) -> None:
        body, content_type = encode_multipart(
            {"title": "Cat"},
            {"photo": ("cat.PNG", b"\x89PNG\r\n\x1a\nrest", "image/png")},
        )
        form = parse_form_data(body, content_type)
        assert form["title"] == "Cat"
        upload = form.files["photo"]
        assert upload.filename == "cat.PNG"
        assert upload.content_type == "image/png"
        assert upload.content.startswith(b"\x89PNG")
        assert upload.extension == "png"
        assert upload.size == len(b"\x89PNG\r\n\x1a\nrest")

    def test_multipart_without_boundary(self) -> None:
        with pytest.raises(BadRequest, match="boundary") as exc_info:
            parse_form_data(b"x", "multipart/form-data")
        assert exc_info.value.status == 400

    def test_upload_save(self, tmp_path) -> None:
        upload = UploadFile("a.txt", "text/plain", b"hello")
        target = upload.save(tmp_path / "a.txt")
        assert target.read_bytes() == b"hello"

    def test_form_repr_lists_files(self) -> None:
        form = FormData({"a": ["1"]}, {"f": UploadFile("f.txt", "text/plain", b"")})
        assert "files=['f']" in repr(form)


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class TestRequest:
    def test_from_asgi(self) -> None:
        request = _request(
            "get",
            "/users",
            query=b"page=2",
            headers=[(b"cookie", b"sid=abc"), (b"referer", b"/home")],
        )
        assert request.method == "GET"
        assert request.path == "/users"
        assert request.url == "/users?page=2"
        assert request.cookies == {"sid": "abc"}
        assert request.headers["referer"] == "/home"
        assert request.client == ("127.0.0.1", 5000)
        assert request.is_get

    def test_url_without_query(self) -> None:
        assert _request(path="/a").url == "/a"

    def test_input_form_wins_over_query(self) -> None:
        request = _request(
            "POST",
            "/",
            query=b"name=query&page=1",
            body=b"name=form",
            headers=[(b"content-type", b"application/x-www-form-urlencoded")],
        )
        assert request.input("name") == "form"
        assert request.input("page") == "1"
        assert request.input("missing", "x") == "x"
        assert request.all_input() == {"name": "form", "page": "1"}

    def test_has(self) -> None:
        request = _request(
            "POST",
            "/",
            query=b"a=1",
            body=b"b=2",
            headers=[(b"content-type", b"application/x-www-form-urlencoded")],
        )
        assert request.has("a", "b")
        assert not request.has("a", "c")

    def test_form_is_cached(self) -> None:
        request = _request(
            "POST",
            "/",
            body=b"a=1",
            headers=[(b"content-type", b"application/x-www-form-urlencoded")],
        )
        assert request.form is request.form

    def test_files(self) -> None:
        body, content_type = encode_multipart({}, {"doc": ("a.pdf", b"%PDF-1.4", "application/pdf")})
        request = _request("POST", "/", body=body, headers=[(b"content-type", content_type.encode())])
        upload = request.file("doc")
        assert upload is not None
        assert upload.filename == "a.pdf"
        assert request.file("other") is None
        assert request.has("doc")


# ---------------------------------------------------------------------------
# Response / Redirect
# ---------------------------------------------------------------------------


class TestResponse:
    def test_defaults(self) -> None:
        response = Response("hi")
        assert response.status == 200
        assert response.content_type == "text/html; charset=utf-8"
        assert response.body_bytes == b"hi"
        assert response.text == "hi"

    def test_chaining_returns_new_objects(self) -> None:
        original = Response("x")
        changed = original.with_status(201).with_header("X-A", "1").with_content_type("text/plain")
        assert original.status == 200
        assert original.headers == ()
        assert changed.status == 201
        assert changed.header("x-a") == "1"
        assert changed.content_type == "text/plain"

    def test_with_headers(self) -> None:
        response = Response().with_headers({"A": "1", "B": "2"})
        assert response.headers == (("A", "1"), ("B", "2"))

    def test_cookies(self) -> None:
        response = Response().with_cookie("a", "1").without_cookie("b")
        assert [c.name for c in response.cookies] == ["a", "b"]
        assert response.cookies[1].max_age == 0

    def test_bytes_body(self) -> None:
        assert Response(b"\x00\x01").text == "\x00\x01"

    def test_redirect(self) -> None:
        response = Redirect("/login").to_response()
        assert response.status == 302
        assert response.header("Location") == "/login"
        assert response.is_redirect

    def test_redirect_status(self) -> None:
        assert Redirect("/x", status=301).to_response().status == 301

    def test_not_redirect(self) -> None:
        assert not Response().is_redirect
