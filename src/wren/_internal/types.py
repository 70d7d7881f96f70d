"""Shared type aliases used across wren modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler, called as handler(ctx, *path_params)
Handler: TypeAlias = Callable[..., Any]

# Error handler, receives (ctx, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]
