"""Error types shared across sqli.

Every failure the UI can report is one of four kinds: the backend could not be
reached, a statement failed, an action was refused locally, or a local file
(config, templates, editor scratch file) could not be read or written.
"""

from __future__ import annotations


class SqliError(Exception):
    """Base class for all sqli errors."""


class DatabaseConnectionError(SqliError, ConnectionError):
    """Network, authentication or driver failure while opening a client."""


class QueryError(SqliError):
    """A statement was malformed or rejected by the backend."""


class ValidationError(SqliError):
    """An action was refused before any I/O took place."""


class StorageError(SqliError, OSError):
    """Reading or writing a local file failed."""


class EditorError(StorageError):
    """The external editor could not be run or exited with an error."""


class MissingDriverError(DatabaseConnectionError):
    """The Python driver for a backend is not installed."""

    def __init__(self, driver_name: str, package_name: str, extra_name: str):
        self.driver_name = driver_name
        self.package_name = package_name
        self.extra_name = extra_name
        super().__init__(
            f"Missing driver for {driver_name}: pip install {package_name} (or sqli[{extra_name}])"
        )
