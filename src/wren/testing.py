"""Test client for wren applications.

Sends requests through the ASGI interface directly, no HTTP involved,
and returns the same ``Response`` type used in production. Cookies set
by the app are kept and sent back, so sessions carry across requests.
"""

import secrets
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from wren.app import App
from wren.http.cookies import parse_cookies
from wren.http.response import Response

# (filename, content, content type)
type FileField = tuple[str, bytes, str]


def encode_multipart(
    data: Mapping[str, str],
    files: Mapping[str, FileField],
) -> tuple[bytes, str]:
    """Encode fields and files as ``multipart/form-data``. Returns (body, content type)."""
    boundary = f"wren-{secrets.token_hex(8)}"
    parts: list[bytes] = []
    for name, value in data.items():
        parts.append(
            f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'.encode()
            + str(value).encode()
            + b"\r\n"
        )
    for name, (filename, content, content_type) in files.items():
        parts.append(
            (
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
                f"Content-Type: {content_type}\r\n\r\n"
            ).encode()
            + content
            + b"\r\n"
        )
    parts.append(f"--{boundary}--\r\n".encode())
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for wren applications.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 200

            response = await client.post("/login", data={"email": "a@b.co"})
            assert response.header("location") == "/dashboard"
    """

    __slots__ = ("app", "cookies")

    def __init__(self, app: App) -> None:
        self.app = app
        self.cookies: dict[str, str] = {}

    async def __aenter__(self) -> "TestClient":
        self.app._ensure_frozen()
        return self

    async def __aexit__(self, *args: object) -> None:
        pass

    async def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
    ) -> Response:
        """Send a GET request."""
        if query:
            path = f"{path}?{urlencode(query)}"
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        data: Mapping[str, str] | None = None,
        files: Mapping[str, FileField] | None = None,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send a POST request.

        *data* is sent URL-encoded, or as multipart together with *files*.
        """
        return await self._send_form("POST", path, data, files, headers, body)

    async def put(
        self,
        path: str,
        *,
        data: Mapping[str, str] | None = None,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send a PUT request."""
        return await self._send_form("PUT", path, data, None, headers, body)

    async def delete(
        self,
        path: str,
        *,
        data: Mapping[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        """Send a DELETE request."""
        return await self._send_form("DELETE", path, data, None, headers, None)

    async def _send_form(
        self,
        method: str,
        path: str,
        data: Mapping[str, str] | None,
        files: Mapping[str, FileField] | None,
        headers: dict[str, str] | None,
        body: bytes | None,
    ) -> Response:
        extra: dict[str, str] = {}
        if files:
            body, extra["content-type"] = encode_multipart(data or {}, files)
        elif data is not None:
            body = urlencode(data).encode("utf-8")
            extra["content-type"] = "application/x-www-form-urlencoded"
        return await self.request(method, path, headers={**extra, **(headers or {})}, body=body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app."""
        path_part, _, query_string = path.partition("?")

        merged = dict(headers or {})
        if self.cookies and not any(k.lower() == "cookie" for k in merged):
            merged["cookie"] = "; ".join(f"{k}={v}" for k, v in self.cookies.items())
        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in merged.items()
        ]

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path_part,
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        request_body = body or b""
        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        status = 200
        response_headers: list[tuple[bytes, bytes]] = []
        body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal status, response_headers
            if message["type"] == "http.response.start":
                status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        content_type = "text/html; charset=utf-8"
        extra_headers: list[tuple[str, str]] = []
        for name_b, value_b in response_headers:
            name = name_b.decode("latin-1")
            value = value_b.decode("latin-1")
            if name == "content-type":
                content_type = value
            elif name == "set-cookie":
                self._store_cookie(value)
                extra_headers.append((name, value))
            elif name != "content-length":
                extra_headers.append((name, value))

        return Response(
            body=b"".join(body_parts),
            status=status,
            content_type=content_type,
            headers=tuple(extra_headers),
        )

    def _store_cookie(self, header: str) -> None:
        pair, _, attributes = header.partition(";")
        for name, value in parse_cookies(pair).items():
            if "max-age=0" in attributes.lower().replace(" ", ""):
                self.cookies.pop(name, None)
            else:
                self.cookies[name] = value
