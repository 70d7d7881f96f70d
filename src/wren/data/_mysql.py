"""MySQL driver over PyMySQL.

PyMySQL binds parameters in ``pyformat`` style (``%(name)s``), so the
builder's ``:name`` placeholders are rewritten when a statement is
prepared. Install with ``pip install wren[mysql]``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from wren.data.connection import Row
from wren.data.errors import DriverNotInstalledError

if TYPE_CHECKING:
    from wren.data.database import DatabaseConfig

DEFAULT_PORT = 3306

_NAMED = re.compile(r"(?<![:\w]):([A-Za-z_]\w*)")


def to_pyformat(sql: str) -> str:
    """Rewrite ``:name`` placeholders as ``%(name)s``.

    Literal ``%`` signs are doubled so the driver does not read them as
    format markers.
    """
    return _NAMED.sub(r"%(\1)s", sql.replace("%", "%%"))


class MySQLStatement:
    """A statement bound to one PyMySQL connection."""

    __slots__ = ("_conn", "_cursor", "_sql")

    def __init__(self, conn: Any, sql: str) -> None:
        self._conn = conn
        self._sql = to_pyformat(sql)
        self._cursor: Any = None

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount if self._cursor is not None else -1

    def execute(self, params: Mapping[str, Any]) -> bool:
        cursor = self._conn.cursor()
        cursor.execute(self._sql, dict(params))
        self._cursor = cursor
        return True

    def fetch_all(self) -> list[Row]:
        if self._cursor is None:
            return []
        return [dict(row) for row in self._cursor.fetchall()]

    def fetch_one(self) -> Row | None:
        if self._cursor is None:
            return None
        row = self._cursor.fetchone()
        return dict(row) if row is not None else None


class MySQLConnection:
    """``Connection`` over a PyMySQL connection in autocommit mode."""

    __slots__ = ("_conn", "echo")

    def __init__(self, conn: Any, *, echo: bool = False) -> None:
        self._conn = conn
        self.echo = echo

    @classmethod
    def open(cls, config: DatabaseConfig) -> MySQLConnection:
        try:
            import pymysql
            import pymysql.cursors
        except ImportError:
            msg = (
                "wren.data requires 'PyMySQL' for MySQL databases. "
                "Install it with: pip install wren[mysql]"
            )
            raise DriverNotInstalledError(msg) from None

        conn = pymysql.connect(
            host=config.host,
            port=config.port or DEFAULT_PORT,
            user=config.username,
            password=config.password,
            database=config.name,
            charset="utf8mb4",
            autocommit=True,
            cursorclass=pymysql.cursors.DictCursor,
        )
        return cls(conn, echo=config.echo)

    @property
    def raw(self) -> Any:
        """The underlying PyMySQL connection."""
        return self._conn

    def prepare(self, sql: str) -> MySQLStatement:
        return MySQLStatement(self._conn, sql)

    def last_insert_id(self) -> int | None:
        return self._conn.insert_id() or None

    def close(self) -> None:
        self._conn.close()
