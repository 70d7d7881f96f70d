"""Security helpers: CSRF protection and password hashing.

CSRF (requires session middleware)::

    from wren.security import CSRFMiddleware

    app.add_middleware(CSRFMiddleware())

Password hashing::

    from wren.security import hash_password, verify_password

    hashed = hash_password("my-password")
    ok = verify_password("my-password", hashed)
"""

from wren.security.csrf import (
    CSRFConfig,
    CSRFMiddleware,
    csrf_field,
    generate_token,
    match_token,
)
from wren.security.passwords import (
    hash_password,
    needs_rehash,
    unique_token,
    verify_password,
)

__all__ = [
    "CSRFConfig",
    "CSRFMiddleware",
    "csrf_field",
    "generate_token",
    "hash_password",
    "match_token",
    "needs_rehash",
    "unique_token",
    "verify_password",
]
