"""Handler registry: explicit ``reference -> callable`` mapping.

Route definitions name their handlers with strings such as
``"PagesController@about"``. The registry turns those names into
callables that were registered up front, so dispatch is a dict lookup
rather than a runtime search for classes or attributes.
"""

import inspect
from collections.abc import Callable
from typing import Any

from wren._internal.types import Handler
from wren.controller import Controller
from wren.errors import ConfigurationError, HandlerNotFound


def function_ref(func: Callable[..., Any]) -> str:
    """The reference a plain function handler is registered under."""
    return f"{func.__module__}.{func.__qualname__}"


def _bind_action(cls: type, func: Callable[..., Any]) -> Handler:
    """Wrap an unbound controller method so each call gets a fresh controller."""

    def action(ctx: Any, *params: str) -> Any:
        return func(cls(), ctx, *params)

    action.__name__ = func.__name__
    action.__qualname__ = f"{cls.__name__}@{func.__name__}"
    action.__doc__ = func.__doc__
    return action


class HandlerRegistry:
    """Maps handler references to callables.

    Every resolved handler is called as ``handler(ctx, *params)``.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, ref: str, handler: Handler) -> None:
        """Register *handler* under *ref*. Duplicate references are an error."""
        if ref in self._handlers:
            msg = f"Handler {ref!r} is already registered."
            raise ConfigurationError(msg)
        self._handlers[ref] = handler

    def register_function(self, func: Handler) -> str:
        """Register a plain function handler and return its reference.

        Registering the same function again returns its existing reference.
        Distinct callables sharing a qualified name (closures from one
        factory, lambdas) get numbered references: ``mod.f``, ``mod.f#2``.
        """
        base = ref = function_ref(func)
        n = 1
        while ref in self._handlers:
            if self._handlers[ref] is func:
                return ref
            n += 1
            ref = f"{base}#{n}"
        self._handlers[ref] = func
        return ref

    def register_controller(self, cls: type, name: str | None = None) -> list[str]:
        """Register every public method of a controller class.

        Each method becomes ``"<name>@<method>"``; *name* defaults to the
        class name. A fresh controller instance is created per dispatch.
        Returns the registered references.
        """
        if not inspect.isclass(cls):
            msg = f"Controllers must be classes, got {cls!r}."
            raise ConfigurationError(msg)

        controller_name = name or cls.__name__
        refs: list[str] = []
        for attr, value in inspect.getmembers(cls, inspect.isfunction):
            # Helpers inherited from the Controller base are not actions
            if attr.startswith("_") or vars(Controller).get(attr) is value:
                continue
            ref = f"{controller_name}@{attr}"
            self.register(ref, _bind_action(cls, value))
            refs.append(ref)
        return refs

    def resolve(self, ref: str) -> Handler:
        """Return the callable for *ref*. Raises ``HandlerNotFound``."""
        try:
            return self._handlers[ref]
        except KeyError:
            raise HandlerNotFound(ref) from None

    def __contains__(self, ref: object) -> bool:
        return ref in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
