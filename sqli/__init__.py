"""sqli - A keyboard-driven terminal browser for SQL databases."""

from typing import TYPE_CHECKING, Any

from ._version import __version__

__all__ = [
    "__version__",
    "main",
    "SqliApp",
    "ConnectionConfig",
]

if TYPE_CHECKING:
    from .app import SqliApp
    from .cli import main
    from .domains.connections.domain.config import ConnectionConfig


def __getattr__(name: str) -> Any:
    """Lazy import for heavy modules to keep package import side-effect free."""
    if name == "main":
        from .cli import main

        return main
    if name == "SqliApp":
        from .app import SqliApp

        return SqliApp
    if name == "ConnectionConfig":
        from .domains.connections.domain.config import ConnectionConfig

        return ConnectionConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
