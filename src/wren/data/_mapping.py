"""Row-to-dataclass mapping with type coercion.

Models may declare a ``record`` dataclass; rows fetched for them are
converted into instances of it. Uses dataclass field introspection, no
metaclass magic.

SQLite hands back strings or ints for columns a dataclass may annotate
differently, so ``int``, ``float``, ``bool`` and ``str`` fields coerce the
raw value. Empty strings in numeric columns coerce to zero.
"""

import dataclasses
import types
from typing import Any, get_args, get_origin, get_type_hints

_COERCIBLE: dict[type, Any] = {
    int: lambda v: int(v) if v != "" else 0,
    float: lambda v: float(v) if v != "" else 0.0,
    bool: lambda v: bool(int(v)) if isinstance(v, str) else bool(v),
    str: str,
}


def _field_types(cls: type) -> dict[str, type | None]:
    """``{field_name: coercion target}``; ``None`` means pass through."""
    hints = get_type_hints(cls)
    result: dict[str, type | None] = {}
    for f in dataclasses.fields(cls):
        annotation = hints.get(f.name, f.type)
        # X | None coerces to X
        if get_origin(annotation) is types.UnionType:
            args = [a for a in get_args(annotation) if a is not type(None)]
            annotation = args[0] if len(args) == 1 else None
        result[f.name] = annotation if annotation in _COERCIBLE else None
    return result


def _coerce(value: Any, target: type | None) -> Any:
    if target is None or value is None or isinstance(value, target):
        return value
    return _COERCIBLE[target](value)


def map_row[T](cls: type[T], row: dict[str, Any]) -> T:
    """Map one dict row to a dataclass instance.

    Columns without a matching field are ignored, so ``SELECT *`` works
    with records that declare fewer fields than the table has.

    Raises ``TypeError`` if *cls* is not a dataclass or a required field
    is missing from the row.
    """
    if not dataclasses.is_dataclass(cls):
        msg = f"{cls.__name__} is not a dataclass; model records must be dataclasses"
        raise TypeError(msg)
    targets = _field_types(cls)
    return cls(**{k: _coerce(v, targets[k]) for k, v in row.items() if k in targets})


def map_rows[T](cls: type[T], rows: list[dict[str, Any]]) -> list[T]:
    """Map a list of dict rows to dataclass instances."""
    if not dataclasses.is_dataclass(cls):
        msg = f"{cls.__name__} is not a dataclass; model records must be dataclasses"
        raise TypeError(msg)
    targets = _field_types(cls)
    return [
        cls(**{k: _coerce(v, targets[k]) for k, v in row.items() if k in targets})
        for row in rows
    ]
