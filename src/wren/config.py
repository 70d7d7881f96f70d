"""Application configuration.

``AppConfig`` is a frozen dataclass: immutable after creation and
attribute-accessed. Applications that keep their settings in a nested
mapping (a dict literal, a parsed TOML file) build it with
``AppConfig.from_mapping``; the raw mapping stays reachable through
``config.settings`` for dotted lookups of app-specific keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from wren.data.database import DatabaseConfig

_MISSING = object()


class Config:
    """Read-only dotted-key view over a nested mapping::

        settings = Config({"database": {"host": "127.0.0.1"}})
        settings.get("database.host")        # "127.0.0.1"
        settings.get("database.port", 5432)  # 5432
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: Mapping[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Walk *key* one dot-separated segment at a time; *default* on any miss."""
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping):
                return default
            node = node.get(part, _MISSING)
            if node is _MISSING:
                return default
        return node

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key, _MISSING) is not _MISSING

    def section(self, key: str) -> Mapping[str, Any]:
        """The mapping at *key*, or an empty one."""
        value = self.get(key)
        return value if isinstance(value, Mapping) else {}

    def __repr__(self) -> str:
        return f"Config({dict(self._data)!r})"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    Override what you need::

        config = AppConfig(secret_key="s3cr3t", view_dir="views", debug=True)
    """

    debug: bool = False

    # Security
    secret_key: str = ""

    # Views
    view_dir: str | Path = "views"

    # Application
    app_name: str = "wren"
    app_url: str = "http://localhost:8000"

    # None means the app has no database; ``ctx.db`` then raises
    database: DatabaseConfig | None = None

    # Limits
    max_content_length: int = 16 * 1024 * 1024

    settings: Config = field(default_factory=Config, repr=False, compare=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AppConfig:
        """Build from a nested mapping::

            AppConfig.from_mapping({
                "debug": True,
                "secret_key": "s3cr3t",
                "app": {"name": "My App", "url": "http://localhost:8000"},
                "database": {"driver": "sqlite", "name": "app.db"},
                "session": {"name": "my_session"},
            })

        Unknown keys are kept and reachable through ``settings``.
        """
        settings = Config(data)
        app = settings.section("app")
        database = settings.section("database")
        return cls(
            debug=bool(data.get("debug", False)),
            secret_key=str(data.get("secret_key", "")),
            view_dir=data.get("view_dir", "views"),
            app_name=str(app.get("name", "wren")),
            app_url=str(app.get("url", "http://localhost:8000")),
            database=DatabaseConfig.from_mapping(database) if database else None,
            max_content_length=int(data.get("max_content_length", 16 * 1024 * 1024)),
            settings=settings,
        )
