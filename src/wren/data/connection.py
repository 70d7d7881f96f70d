"""Database connection protocol and the SQLite driver.

The query builder only needs four operations from a connection::

    statement = connection.prepare(sql)
    statement.execute(params)   # -> bool
    statement.fetch_all()       # -> list of dict rows
    statement.fetch_one()       # -> dict row or None

Any object with this shape works. ``SQLiteConnection`` wraps stdlib
``sqlite3``, whose ``:name`` parameter style matches the builder's
placeholders exactly.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

type Row = dict[str, Any]


@runtime_checkable
class Statement(Protocol):
    """A prepared statement."""

    @property
    def rowcount(self) -> int: ...
    def execute(self, params: Mapping[str, Any]) -> bool: ...
    def fetch_all(self) -> list[Row]: ...
    def fetch_one(self) -> Row | None: ...


@runtime_checkable
class Connection(Protocol):
    """A database connection owned by one request."""

    def prepare(self, sql: str) -> Statement: ...
    def last_insert_id(self) -> int | None: ...
    def close(self) -> None: ...


class SQLiteStatement:
    """A statement bound to one ``sqlite3`` connection."""

    __slots__ = ("_conn", "_cursor", "_sql")

    def __init__(self, conn: sqlite3.Connection, sql: str) -> None:
        self._conn = conn
        self._sql = sql
        self._cursor: sqlite3.Cursor | None = None

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount if self._cursor is not None else -1

    def execute(self, params: Mapping[str, Any]) -> bool:
        self._cursor = self._conn.execute(self._sql, dict(params))
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


class SQLiteConnection:
    """``Connection`` over stdlib ``sqlite3``.

    Runs in autocommit mode: each statement commits on its own.
    """

    __slots__ = ("_conn", "echo")

    def __init__(self, conn: sqlite3.Connection, *, echo: bool = False) -> None:
        conn.row_factory = sqlite3.Row
        self._conn = conn
        # Statements on this connection are logged at INFO instead of DEBUG
        self.echo = echo

    @classmethod
    def open(cls, path: str, *, echo: bool = False) -> SQLiteConnection:
        # isolation_level=None is autocommit; check_same_thread=False because
        # ASGI requests run on worker threads
        conn = sqlite3.connect(path, isolation_level=None, check_same_thread=False)
        return cls(conn, echo=echo)

    @property
    def raw(self) -> sqlite3.Connection:
        """The underlying ``sqlite3.Connection`` (schema setup, scripts)."""
        return self._conn

    def prepare(self, sql: str) -> SQLiteStatement:
        return SQLiteStatement(self._conn, sql)

    def last_insert_id(self) -> int | None:
        row = self._conn.execute("SELECT last_insert_rowid()").fetchone()
        return row[0] if row is not None else None

    def execute_script(self, sql: str) -> None:
        """Run several statements at once (schema setup)."""
        self._conn.executescript(sql)

    def close(self) -> None:
        self._conn.close()
