"""Table definitions.

A model names a table and its primary key; every classmethod opens a
fresh ``QueryBuilder`` on the connection it is given::

    @dataclass(frozen=True, slots=True)
    class UserRecord:
        id: int
        name: str
        email: str

    class User(Model):
        table = "users"
        record = UserRecord

    User.find(ctx.db, 5)
    User.query(ctx.db).select_columns(["name"]).where("email", "=", email).first()

Table and key names are class attributes written in code, which keeps
them out of reach of request input.
"""

from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

from wren.data.connection import Connection
from wren.data.query import QueryBuilder


class Model:
    """Base class for table definitions. Not instantiated."""

    table: ClassVar[str] = ""
    primary_key: ClassVar[str] = "id"
    record: ClassVar[type | None] = None

    @classmethod
    def query(cls, db: Connection) -> QueryBuilder:
        """A new builder for this model's table."""
        if not cls.table:
            msg = f"{cls.__name__}.table is not set"
            raise TypeError(msg)
        return QueryBuilder(db, cls.table, primary_key=cls.primary_key, record=cls.record)

    @classmethod
    def all(cls, db: Connection) -> list[Any]:
        return cls.query(db).all()

    @classmethod
    def select(cls, db: Connection, columns: Sequence[str] | None = None) -> QueryBuilder:
        """Start a SELECT for *columns* (all when omitted); chain ``where*`` then ``get``."""
        return cls.query(db).select_columns(columns)

    @classmethod
    def find(cls, db: Connection, pk: Any) -> Any | None:
        return cls.query(db).find(pk)

    @classmethod
    def create(cls, db: Connection, values: Mapping[str, Any]) -> bool:
        return cls.query(db).create(values)

    @classmethod
    def update(cls, db: Connection, values: Mapping[str, Any], pk: Any) -> bool:
        return cls.query(db).update(values, pk)

    @classmethod
    def delete(cls, db: Connection, pk: Any) -> bool:
        return cls.query(db).delete(pk)
