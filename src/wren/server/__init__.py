"""Request pipeline internals: dispatch, error pages and ASGI sending."""
