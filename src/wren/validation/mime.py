"""Content sniffing for uploaded files.

The ``Content-Type`` a browser sends with an upload is whatever the
client claims. These functions look at the leading bytes instead::

    sniff_mime(upload.content)                 # "image/png"
    check_mime(upload.content, ["png", "jpg"])  # True / False
"""

from collections.abc import Iterable

# (offset, signature, mime type), checked in order
_SIGNATURES: tuple[tuple[int, bytes, str], ...] = (
    (0, b"\x89PNG\r\n\x1a\n", "image/png"),
    (0, b"\xff\xd8\xff", "image/jpeg"),
    (0, b"GIF87a", "image/gif"),
    (0, b"GIF89a", "image/gif"),
    (0, b"BM", "image/bmp"),
    (0, b"II*\x00", "image/tiff"),
    (0, b"MM\x00*", "image/tiff"),
    (0, b"\x00\x00\x01\x00", "image/x-icon"),
    (8, b"WEBP", "image/webp"),
    (0, b"%PDF-", "application/pdf"),
    (0, b"PK\x03\x04", "application/zip"),
)

# Extension -> mime type, for rules written as "png,jpg"
EXTENSIONS: dict[str, str] = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    "ico": "image/x-icon",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "pdf": "application/pdf",
    "zip": "application/zip",
}

IMAGE_TYPES: frozenset[str] = frozenset(
    EXTENSIONS[ext] for ext in ("png", "svg", "bmp", "jpeg", "gif", "tiff", "ico", "webp")
)

# SVG is XML; look for the root element near the start
_SVG_WINDOW = 1024


def sniff_mime(data: bytes) -> str | None:
    """The mime type the content of *data* indicates, or ``None`` if unknown."""
    for offset, signature, mime in _SIGNATURES:
        if data[offset : offset + len(signature)] == signature:
            if mime == "image/webp" and not data.startswith(b"RIFF"):
                continue
            return mime
    head = data[:_SVG_WINDOW].lstrip().lower()
    if head.startswith((b"<?xml", b"<svg", b"<!doctype svg")) and b"<svg" in head:
        return "image/svg+xml"
    return None


def normalize_mime(kind: str) -> str:
    """``"png"``, ``".png"`` and ``"image/png"`` all become ``"image/png"``."""
    kind = kind.strip().lower().lstrip(".")
    return EXTENSIONS.get(kind, kind)


def check_mime(data: bytes, allowed: Iterable[str]) -> bool:
    """True when the sniffed type of *data* is one of *allowed* (extensions or mime types)."""
    mime = sniff_mime(data)
    if mime is None:
        return False
    return mime in {normalize_mime(kind) for kind in allowed}
