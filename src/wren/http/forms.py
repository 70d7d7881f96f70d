"""Form body parsing: URL-encoded and multipart.

URL-encoded bodies use stdlib ``urllib.parse``; multipart bodies are
parsed with ``python-multipart``. Uploaded files are held in memory.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from wren.errors import BadRequest

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data"


@dataclass(frozen=True, slots=True)
class UploadFile:
    """A file received in a multipart form.

    ``content_type`` is what the client claimed; use
    ``wren.validation.mime.sniff_mime(upload.content)`` for what the
    bytes actually are.
    """

    filename: str
    content_type: str
    content: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        """Lower-cased extension without the dot, ``""`` when there is none."""
        return Path(self.filename).suffix.lstrip(".").lower()

    def save(self, path: str | Path) -> Path:
        """Write the content to *path*. Parent directories must exist."""
        target = Path(path)
        target.write_bytes(self.content)
        return target


class FormData(Mapping[str, str]):
    """Parsed form fields plus uploaded files.

    ``form["name"]`` is the first value of a field; ``get_list`` returns
    all of them (checkboxes, multi-selects). ``files`` maps field names
    to ``UploadFile``.
    """

    __slots__ = ("_data", "_files")

    def __init__(
        self,
        data: dict[str, list[str]] | None = None,
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        self._data = data or {}
        self._files = files or {}

    @property
    def files(self) -> Mapping[str, UploadFile]:
        return self._files

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FormData({dict(self)!r}, files={list(self._files)!r})"

    def get_list(self, key: str) -> list[str]:
        return list(self._data.get(key, ()))


EMPTY_FORM = FormData()


def parse_form_data(body: bytes, content_type: str | None) -> FormData:
    """Parse *body* according to *content_type*.

    Bodies with any other content type (JSON, plain text, none at all)
    parse to an empty ``FormData``; handlers that need them read
    ``request.body`` directly.
    """
    if not body or not content_type:
        return EMPTY_FORM
    kind = content_type.split(";", 1)[0].strip().lower()
    if kind == FORM_URLENCODED:
        return FormData(parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True))
    if kind == MULTIPART:
        return _parse_multipart(body, content_type)
    return EMPTY_FORM


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    _, options = parse_options_header(content_type)
    boundary = options.get(b"boundary")
    if not boundary:
        raise BadRequest("Multipart form data missing boundary parameter")

    data: dict[str, list[str]] = {}
    files: dict[str, UploadFile] = {}

    headers: dict[str, str] = {}
    header_name = bytearray()
    header_value = bytearray()
    content = bytearray()

    def on_part_begin() -> None:
        headers.clear()
        content.clear()

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        header_name.extend(chunk[start:end])

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        header_value.extend(chunk[start:end])

    def on_header_end() -> None:
        headers[header_name.decode("latin-1").lower()] = header_value.decode("latin-1")
        header_name.clear()
        header_value.clear()

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        content.extend(chunk[start:end])

    def on_part_end() -> None:
        _, params = parse_options_header(headers.get("content-disposition", ""))
        name = params.get(b"name")
        if name is None:
            return
        field_name = name.decode("utf-8")
        filename = params.get(b"filename")
        if filename is None:
            data.setdefault(field_name, []).append(bytes(content).decode("utf-8", errors="replace"))
            return
        # An empty file input still sends a part, with no filename
        if not filename:
            return
        files[field_name] = UploadFile(
            filename=filename.decode("utf-8"),
            content_type=headers.get("content-type", "application/octet-stream"),
            content=bytes(content),
        )

    callbacks: dict[str, Any] = {
        "on_part_begin": on_part_begin,
        "on_header_field": on_header_field,
        "on_header_value": on_header_value,
        "on_header_end": on_header_end,
        "on_part_data": on_part_data,
        "on_part_end": on_part_end,
    }
    parser = MultipartParser(boundary, callbacks)
    try:
        parser.write(body)
        parser.finalize()
    except MultipartParseError as exc:
        raise BadRequest(f"Malformed multipart body: {exc}") from exc
    return FormData(data, files)
