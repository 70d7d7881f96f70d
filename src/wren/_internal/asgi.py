"""Raw ASGI type aliases and body reading."""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]


class BodyTooLarge(Exception):  # noqa: N818
    """The request body exceeded the configured limit."""


async def read_body(receive: Receive, limit: int | None = None) -> bytes:
    """Read every ``http.request`` chunk into one bytes object.

    Raises ``BodyTooLarge`` as soon as more than *limit* bytes arrive.
    """
    chunks: list[bytes] = []
    size = 0
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunk = message.get("body", b"")
        if chunk:
            size += len(chunk)
            if limit is not None and size > limit:
                raise BodyTooLarge(size)
            chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)
