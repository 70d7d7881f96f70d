"""Fluent query builder.

Accumulates one parameterized SQL statement through chained calls, then
executes it through a ``Connection``. Values are always bound as named
parameters; table and column names are interpolated and must therefore
be plain identifiers defined in code.

Usage::

    users = (
        QueryBuilder(conn, "users")
        .select_columns(["id", "name"])
        .where("active", "=", 1)
        .where_and("age", ">=", 18)
        .get()
    )
    # SELECT id, name FROM users WHERE active = :active AND age >= :age

    QueryBuilder(conn, "users").find(5)
    # SELECT * FROM users WHERE id = :id LIMIT 1

One builder builds exactly one statement. Chain methods mutate and return
the same builder; executing it (``get``, ``first``, ``create``, ``update``,
``delete``) consumes it, and any further call raises ``DataError``.

Transparency: ``.sql`` and ``.params`` show exactly what will run.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from wren.data._mapping import map_row, map_rows
from wren.data.connection import Connection, Statement
from wren.data.errors import (
    DataError,
    InvalidIdentifier,
    InvalidOperator,
    QueryExecutionFailed,
)

logger = logging.getLogger("wren.data")

OPERATORS: frozenset[str] = frozenset({"=", ">", "<", ">=", "<=", "LIKE", "<>"})

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def check_identifier(name: str) -> str:
    """Return *name* if it is a plain SQL identifier, else raise ``InvalidIdentifier``."""
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        msg = f"{name!r} is not a valid SQL identifier"
        raise InvalidIdentifier(msg)
    return name


class QueryBuilder:
    """Builds and runs a single SQL statement against one table."""

    __slots__ = (
        "_between_count",
        "_clauses",
        "_conn",
        "_executed",
        "_has_where",
        "_head",
        "_params",
        "_pk",
        "_record",
        "_table",
        "inserted_id",
    )

    def __init__(
        self,
        connection: Connection,
        table: str,
        *,
        primary_key: str = "id",
        record: type | None = None,
    ) -> None:
        self._conn = connection
        self._table = check_identifier(table)
        self._pk = check_identifier(primary_key)
        self._record = record
        self._head: str | None = None
        self._clauses: list[str] = []
        self._params: dict[str, Any] = {}
        self._has_where = False
        self._between_count = 0
        self._executed = False
        self.inserted_id: int | None = None

    # -- Introspection --

    @property
    def table(self) -> str:
        return self._table

    @property
    def primary_key(self) -> str:
        return self._pk

    @property
    def sql(self) -> str:
        """The statement as it stands, fragments joined with single spaces."""
        parts = [self._head] if self._head else []
        return " ".join([*parts, *self._clauses])

    @property
    def params(self) -> dict[str, Any]:
        """The bound parameters, by placeholder name."""
        return dict(self._params)

    # -- Building --

    def select_columns(self, columns: Sequence[str] | None = None) -> QueryBuilder:
        """Set the statement head to ``SELECT <columns|*> FROM <table>``."""
        self._check_open()
        cols = ", ".join(check_identifier(c) for c in columns) if columns else "*"
        self._head = f"SELECT {cols} FROM {self._table}"
        return self

    def where(self, column: str, op: str, value: Any) -> QueryBuilder:
        """Add a condition. Opens the WHERE clause, or joins with AND."""
        return self._condition("AND", column, op, value)

    def where_and(self, column: str, op: str, value: Any) -> QueryBuilder:
        """Add a condition joined with ``AND``."""
        return self._condition("AND", column, op, value)

    def where_or(self, column: str, op: str, value: Any) -> QueryBuilder:
        """Add a condition joined with ``OR``."""
        return self._condition("OR", column, op, value)

    def where_like(self, column: str, value: Any) -> QueryBuilder:
        """Add a ``LIKE`` condition::

            builder.where_like("name", "%ann%")
        """
        return self._condition("AND", column, "LIKE", value)

    def where_between(
        self,
        column: str,
        bounds: Sequence[Any],
        *,
        connector: str = "AND",
    ) -> QueryBuilder:
        """Add ``<column> BETWEEN :val1 AND :val2``.

        Bounds bind to synthetic ``valN`` names. Opens the WHERE clause
        when it is the first condition, otherwise joins with *connector*.
        """
        self._check_open()
        if len(bounds) != 2:
            msg = f"where_between() needs exactly two bounds, got {len(bounds)}"
            raise ValueError(msg)
        connector = self._check_connector(connector)
        low, high = bounds
        first = f"val{self._between_count + 1}"
        second = f"val{self._between_count + 2}"
        self._between_count += 2
        self._params[first] = low
        self._params[second] = high
        self._append_condition(
            connector, f"{check_identifier(column)} BETWEEN :{first} AND :{second}"
        )
        return self

    # -- Reading --

    def get(self) -> list[Any]:
        """Execute and return every matching row."""
        if self._head is None:
            self.select_columns()
        rows = self._execute(lambda stmt: stmt.fetch_all())
        if self._record is not None:
            return map_rows(self._record, rows)
        return rows

    def first(self) -> Any | None:
        """Execute with ``LIMIT 1`` and return the row, or ``None`` when there is none."""
        if self._head is None:
            self.select_columns()
        self._check_open()
        self._clauses.append("LIMIT 1")
        row = self._execute(lambda stmt: stmt.fetch_one())
        if row is None or self._record is None:
            return row
        return map_row(self._record, row)

    def find(self, pk: Any) -> Any | None:
        """The row whose primary key equals *pk*, or ``None``."""
        return self.select_columns().where(self._pk, "=", pk).first()

    def all(self) -> list[Any]:
        """Every row of the table."""
        return self.select_columns().get()

    # -- Writing --

    def create(self, values: Mapping[str, Any]) -> bool:
        """Insert one row built from *values*' keys and values."""
        self._check_open()
        if not values:
            msg = "create() needs at least one column value"
            raise DataError(msg)
        columns = [check_identifier(col) for col in values]
        placeholders = [f":{self._bind(col, values[col])}" for col in columns]
        self._head = (
            f"INSERT INTO {self._table} ({', '.join(columns)}) "
            f"VALUES ({', '.join(placeholders)})"
        )
        self._execute(lambda stmt: True)
        self.inserted_id = self._conn.last_insert_id()
        return True

    def update(self, values: Mapping[str, Any], pk: Any) -> bool:
        """Update the columns in *values* for the row whose primary key is *pk*."""
        self._check_open()
        if not values:
            msg = "update() needs at least one column value"
            raise DataError(msg)
        assignments = [
            f"{check_identifier(col)} = :{self._bind(col, value)}" for col, value in values.items()
        ]
        self._head = f"UPDATE {self._table} SET {', '.join(assignments)}"
        self._append_condition("AND", f"{self._pk} = :{self._bind(self._pk, pk)}")
        self._execute(lambda stmt: True)
        return True

    def delete(self, pk: Any) -> bool:
        """Delete the row whose primary key is *pk*."""
        self._check_open()
        self._head = f"DELETE FROM {self._table}"
        self._append_condition("AND", f"{self._pk} = :{self._bind(self._pk, pk)}")
        self._execute(lambda stmt: True)
        return True

    # -- Internals --

    def _condition(self, connector: str, column: str, op: str, value: Any) -> QueryBuilder:
        self._check_open()
        if op not in OPERATORS:
            raise InvalidOperator(op)
        name = self._bind(check_identifier(column), value)
        self._append_condition(connector, f"{column} {op} :{name}")
        return self

    def _append_condition(self, connector: str, condition: str) -> None:
        prefix = connector if self._has_where else "WHERE"
        self._clauses.append(f"{prefix} {condition}")
        self._has_where = True

    def _bind(self, column: str, value: Any) -> str:
        """Bind *value* under a name derived from *column*; never reuses a name."""
        base = column.replace(".", "_")
        name = base
        n = 2
        while name in self._params:
            name = f"{base}_{n}"
            n += 1
        self._params[name] = value
        return name

    @staticmethod
    def _check_connector(connector: str) -> str:
        upper = connector.upper()
        if upper not in ("AND", "OR"):
            msg = f"Connector must be AND or OR, got {connector!r}"
            raise ValueError(msg)
        return upper

    def _check_open(self) -> None:
        if self._executed:
            msg = "This QueryBuilder has already executed; start a new one per statement."
            raise DataError(msg)

    def _execute[T](self, fetch: Callable[[Statement], T]) -> T:
        """Prepare, bind, execute and fetch. Driver errors become ``QueryExecutionFailed``."""
        self._check_open()
        self._executed = True
        sql = self.sql
        t0 = time.perf_counter()
        try:
            statement = self._conn.prepare(sql)
            statement.execute(self._params)
            return fetch(statement)
        except DataError:
            raise
        except Exception as exc:
            raise QueryExecutionFailed(str(exc), sql=sql, params=self._params) from exc
        finally:
            elapsed = (time.perf_counter() - t0) * 1000
            level = logging.INFO if getattr(self._conn, "echo", False) else logging.DEBUG
            logger.log(level, "%6.1fms  %s  params=%r", elapsed, sql, self._params)

    def __repr__(self) -> str:
        return f"<QueryBuilder {self.sql!r} params={self._params!r}>"
