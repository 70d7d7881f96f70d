"""Database access for wren: a fluent query builder over plain connections.

Not an ORM. SQL in, dict rows (or dataclass records) out.

Basic usage::

    from wren.data import Database, QueryBuilder

    db = Database("sqlite:///app.db")

    with db.connection() as conn:
        QueryBuilder(conn, "users").create({"name": "Ann", "email": "ann@example.com"})
        ann = QueryBuilder(conn, "users").find(1)

Inside a request handler, use the connection the context opens lazily::

    def show(self, ctx, user_id):
        user = User.find(ctx.db, int(user_id))
"""

from wren.data._mysql import MySQLConnection
from wren.data.connection import Connection, SQLiteConnection, Statement
from wren.data.database import Database, DatabaseConfig
from wren.data.errors import (
    DataError,
    DriverNotInstalledError,
    InvalidIdentifier,
    InvalidOperator,
    QueryExecutionFailed,
)
from wren.data.model import Model
from wren.data.query import OPERATORS, QueryBuilder

__all__ = [
    "OPERATORS",
    "Connection",
    "DataError",
    "Database",
    "DatabaseConfig",
    "DriverNotInstalledError",
    "InvalidIdentifier",
    "InvalidOperator",
    "Model",
    "MySQLConnection",
    "QueryBuilder",
    "QueryExecutionFailed",
    "SQLiteConnection",
    "Statement",
]
