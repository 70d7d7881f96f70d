"""Validation results and the message bag."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


class MessageBag(Mapping[str, list[str]]):
    """Field name -> ordered error messages.

    Falsy when empty. Templates read it through ``has``/``first``::

        {% if errors.has("email") %}
            <p class="error">{{ errors.first("email") }}</p>
        {% endif %}
    """

    __slots__ = ("_messages",)

    def __init__(self, messages: Mapping[str, list[str]] | None = None) -> None:
        self._messages: dict[str, list[str]] = {k: list(v) for k, v in (messages or {}).items()}

    def add(self, field_name: str, message: str) -> None:
        self._messages.setdefault(field_name, []).append(message)

    def has(self, field_name: str) -> bool:
        return bool(self._messages.get(field_name))

    def first(self, field_name: str, default: str = "") -> str:
        messages = self._messages.get(field_name)
        return messages[0] if messages else default

    def messages(self, field_name: str) -> list[str]:
        return list(self._messages.get(field_name, ()))

    def all(self) -> list[str]:
        """Every message, in field order."""
        return [msg for messages in self._messages.values() for msg in messages]

    def to_dict(self) -> dict[str, list[str]]:
        return {k: list(v) for k, v in self._messages.items()}

    def __getitem__(self, key: str) -> list[str]:
        return self._messages[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __bool__(self) -> bool:
        return bool(self._messages)

    def __repr__(self) -> str:
        return f"MessageBag({self._messages!r})"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of validating input against a set of rules.

    The result is falsy when invalid, so you can write::

        result = validate(form, rules)
        if not result:
            return View("posts.create", errors=result.errors)

    ``data`` holds the values of every field that passed.
    """

    data: dict[str, Any]
    errors: MessageBag = field(default_factory=MessageBag)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid
