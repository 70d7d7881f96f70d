"""Data layer error hierarchy."""

from collections.abc import Mapping
from typing import Any

from wren.errors import WrenError


class DataError(WrenError):
    """Base for all wren.data errors."""


class DriverNotInstalledError(DataError):
    """Raised when the configured database driver is not available."""


class InvalidOperator(DataError):  # noqa: N818
    """A ``where*`` call used a comparison operator the builder does not allow."""

    def __init__(self, operator: str) -> None:
        self.operator = operator
        super().__init__(f"Invalid operator {operator!r}")


class InvalidIdentifier(DataError):  # noqa: N818
    """A table or column name is not a plain SQL identifier.

    Identifiers are interpolated into SQL text, so they must come from code,
    never from request input.
    """


class QueryExecutionFailed(DataError):  # noqa: N818
    """The database driver failed to prepare or execute a statement.

    ``str(exc)`` is the driver's own message; the statement and its
    bindings are kept for logging.
    """

    def __init__(self, message: str, *, sql: str = "", params: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.sql = sql
        self.params = dict(params or {})
