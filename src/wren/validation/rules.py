"""Built-in validation rules.

Each validator is a callable with the signature::

    def rule(value) -> str | None:
        '''Return an error message, or None if valid.'''

Values are form strings, ``UploadFile`` objects for file fields, or
``None`` when the field was not submitted. Parameterized validators are
factories returning a validator::

    def max_length(n: int) -> Validator:
        def check(value) -> str | None:
            ...
        return check

Rules can also be written as a pipe-separated string, parsed by
``parse_rules``::

    "required|email|max:120|unique:users,email"
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from wren.data.connection import Connection
from wren.data.query import QueryBuilder
from wren.errors import ConfigurationError
from wren.http.forms import UploadFile
from wren.validation.mime import IMAGE_TYPES, check_mime, sniff_mime

# Type alias for a validator function
type Validator = Callable[[Any], str | None]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def required(value: Any) -> str | None:
    """Field must be present and non-empty (a file counts as present)."""
    if isinstance(value, UploadFile):
        return None
    if value is None or not str(value).strip():
        return "This field is required"
    return None


def optional(value: Any) -> str | None:
    """Marker: when the field is empty, skip the rest of its rules."""
    return None


# ---------------------------------------------------------------------------
# Type
# ---------------------------------------------------------------------------


def string(value: Any) -> str | None:
    """Value must be text (not a file)."""
    if not isinstance(value, str):
        return "Must be text"
    return None


def integer(value: Any) -> str | None:
    """Value must be a valid integer."""
    try:
        int(_text(value))
    except ValueError:
        return "Must be a whole number"
    return None


def number(value: Any) -> str | None:
    """Value must be a valid number (int or float)."""
    try:
        float(_text(value))
    except ValueError:
        return "Must be a number"
    return None


numeric = number


def alpha_numeric(value: Any) -> str | None:
    """Value must contain only ASCII letters and digits."""
    text = _text(value)
    if not (text.isascii() and text.isalnum()):
        return "Must contain only letters and digits"
    return None


# ---------------------------------------------------------------------------
# Length
# ---------------------------------------------------------------------------


def max_length(n: int) -> Validator:
    """String must be at most *n* characters."""

    def check(value: Any) -> str | None:
        if len(_text(value)) > n:
            return f"Must be at most {n} characters"
        return None

    return check


def min_length(n: int) -> Validator:
    """String must be at least *n* characters."""

    def check(value: Any) -> str | None:
        if len(_text(value)) < n:
            return f"Must be at least {n} characters"
        return None

    return check


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

# Basic email pattern; checks structure, not deliverability
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


def email(value: Any) -> str | None:
    """Value must be a valid email address (basic format check)."""
    if not _EMAIL_RE.match(_text(value)):
        return "Must be a valid email address"
    return None


_URL_RE = re.compile(r"^https?://[^\s/$.?#].\S*$", re.IGNORECASE)


def url(value: Any) -> str | None:
    """Value must be an http or https URL."""
    if not _URL_RE.match(_text(value)):
        return "Must be a valid URL"
    return None


def matches(pattern: str, message: str | None = None) -> Validator:
    """Value must match the given regex pattern."""
    compiled = re.compile(pattern)

    def check(value: Any) -> str | None:
        if not compiled.match(_text(value)):
            return message or f"Must match pattern: {pattern}"
        return None

    return check


def one_of(*choices: str) -> Validator:
    """Value must be one of the given choices."""
    allowed = frozenset(choices)

    def check(value: Any) -> str | None:
        if _text(value) not in allowed:
            return f"Must be one of: {', '.join(sorted(allowed))}"
        return None

    return check


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def file(value: Any) -> str | None:
    """Value must be an uploaded file."""
    if not isinstance(value, UploadFile):
        return "Must be a file"
    return None


def image(value: Any) -> str | None:
    """Value must be an uploaded image, judged by its content."""
    if not isinstance(value, UploadFile) or sniff_mime(value.content) not in IMAGE_TYPES:
        return "Must be an image"
    return None


def mime(*kinds: str) -> Validator:
    """Uploaded content must be one of *kinds* (``"png"`` or ``"image/png"``)."""

    def check(value: Any) -> str | None:
        if not isinstance(value, UploadFile) or not check_mime(value.content, kinds):
            return f"Must be a file of type: {', '.join(kinds)}"
        return None

    return check


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


def unique(
    db: Connection | Callable[[], Connection],
    table: str,
    column: str,
    ignore: Any = None,
    pk: str = "id",
) -> Validator:
    """No row of *table* may already hold the value in *column*.

    Pass the current row's key as *ignore* when updating it. *db* may
    be a connection or a zero-argument callable returning one; the
    callable is only invoked when the rule runs.
    """

    def check(value: Any) -> str | None:
        conn = db() if callable(db) else db
        query = QueryBuilder(conn, table, primary_key=pk).select_columns([pk]).where(
            column, "=", value
        )
        if ignore is not None:
            query = query.where_and(pk, "<>", ignore)
        if query.first() is not None:
            return "Has already been taken"
        return None

    return check


# ---------------------------------------------------------------------------
# Pipe-string rules
# ---------------------------------------------------------------------------

_SIMPLE_RULES: dict[str, Validator] = {
    "required": required,
    "optional": optional,
    "string": string,
    "integer": integer,
    "numeric": numeric,
    "email": email,
    "url": url,
    "alpha_numeric": alpha_numeric,
    "file": file,
    "image": image,
}

_PARAM_RULES: frozenset[str] = frozenset({"min", "max", "mime", "unique", "in"})


def parse_rules(
    spec: str,
    *,
    db: Connection | Callable[[], Connection] | None = None,
) -> list[Validator]:
    """Turn ``"required|min:3|max:20"`` into a list of validators.

    ``min`` and ``max`` bound the length in characters; ``unique`` takes
    ``table,column[,ignore[,pk]]`` and needs *db*. Unknown rule names
    raise ``ConfigurationError``.
    """
    validators: list[Validator] = []
    for token in filter(None, (part.strip() for part in spec.split("|"))):
        name, sep, arg = token.partition(":")
        if not sep:
            if name not in _SIMPLE_RULES:
                msg = f"Invalid rule {name!r}"
                raise ConfigurationError(msg)
            validators.append(_SIMPLE_RULES[name])
            continue
        if name not in _PARAM_RULES:
            msg = f"Invalid rule {name!r}"
            raise ConfigurationError(msg)
        args = [a.strip() for a in arg.split(",")]
        validators.append(_param_rule(name, args, db))
    return validators


def _param_rule(
    name: str,
    args: list[str],
    db: Connection | Callable[[], Connection] | None,
) -> Validator:
    if name in ("min", "max"):
        try:
            n = int(args[0])
        except ValueError:
            msg = f"Rule {name!r} needs an integer argument, got {args[0]!r}"
            raise ConfigurationError(msg) from None
        return min_length(n) if name == "min" else max_length(n)
    if name == "mime":
        return mime(*args)
    if name == "in":
        return one_of(*args)
    # unique:table,column[,ignore[,pk]]
    if db is None:
        msg = "The 'unique' rule needs a database connection"
        raise ConfigurationError(msg)
    if len(args) < 2:
        msg = "The 'unique' rule needs at least a table and a column: unique:table,column"
        raise ConfigurationError(msg)
    table, column, *rest = args
    ignore = rest[0] if rest and rest[0] else None
    pk = rest[1] if len(rest) > 1 and rest[1] else "id"
    return unique(db, table, column, ignore, pk)
