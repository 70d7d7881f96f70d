"""Immutable HTTP request.

The body is read in full at the ASGI boundary before the synchronous
pipeline runs, so everything on a ``Request`` is plain data. Form
fields and uploads are parsed lazily on first access and cached.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from wren.http.cookies import parse_cookies
from wren.http.forms import FormData, UploadFile, parse_form_data
from wren.http.headers import Headers
from wren.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``input()`` and ``has()`` read from the query string and the form
    body together, with form fields taking precedence::

        title = ctx.request.input("title", "")
        if ctx.request.has("title", "body"):
            ...
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    cookies: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    client: tuple[str, int] | None = None

    # Parsed form cache; the dict is mutable even though the field is not
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw}"
        return self.path

    @property
    def is_get(self) -> bool:
        return self.method == "GET"

    @property
    def form(self) -> FormData:
        """The parsed form body (empty for non-form content types)."""
        if "form" not in self._cache:
            self._cache["form"] = parse_form_data(self.body, self.content_type)
        return self._cache["form"]

    @property
    def files(self) -> Mapping[str, UploadFile]:
        return self.form.files

    def file(self, name: str) -> UploadFile | None:
        return self.form.files.get(name)

    def input(self, key: str, default: Any = None) -> Any:
        """A form field, else a query parameter, else *default*."""
        if key in self.form:
            return self.form[key]
        return self.query.get(key, default)

    def has(self, *keys: str) -> bool:
        """True when every key is present in the form, query or files."""
        return all(k in self.form or k in self.query or k in self.form.files for k in keys)

    def all_input(self) -> dict[str, str]:
        """Query parameters overlaid with form fields (first values only)."""
        return {**dict(self.query), **dict(self.form)}

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], body: bytes = b"") -> Request:
        """Build a request from an HTTP scope and its fully read body."""
        headers = Headers(scope.get("headers", ()))
        client = scope.get("client")
        return cls(
            method=str(scope["method"]).upper(),
            path=scope.get("path", "/"),
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            cookies=parse_cookies(headers.get("cookie", "")),
            body=body,
            client=tuple(client) if client else None,
        )
