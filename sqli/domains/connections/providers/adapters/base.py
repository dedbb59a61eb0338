"""Base class for database adapters.

An adapter is the capability interface for one backend: it opens clients,
introspects databases, tables and columns, runs single statements and
generates the preview and describe queries used by the sidebar.
"""

from __future__ import annotations

import importlib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqli.domains.query.domain.result import ExecuteResult, QueryResult, make_select_result
from sqli.shared.core.errors import MissingDriverError

if TYPE_CHECKING:
    from sqli.domains.connections.domain.config import ConnectionConfig


def resolve_file_path(path_str: str) -> Path:
    """Resolve a file path for file-based databases, expanding ``~``."""
    return Path(path_str.strip()).expanduser().resolve()


class DatabaseAdapter(ABC):
    """Abstract base class for database adapters."""

    #: Default TCP port, None for file-based backends
    default_port: int | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this database type."""

    @property
    def install_extra(self) -> str | None:
        """Name of the [extra] for pip install."""
        return None

    @property
    def install_package(self) -> str | None:
        """Name of the package providing the driver."""
        return None

    def import_driver(self, module_name: str) -> Any:
        """Import this backend's driver module or raise MissingDriverError."""
        try:
            return importlib.import_module(module_name)
        except ImportError as e:
            raise MissingDriverError(
                self.name, self.install_package or module_name, self.install_extra or module_name
            ) from e

    @property
    def supports_multiple_databases(self) -> bool:
        return True

    @property
    def system_databases(self) -> frozenset[str]:
        """Lowercase names of system databases hidden from listings by default."""
        return frozenset()

    def default_database(self) -> str:
        """Database to connect to when only listing databases."""
        return ""

    def connect_database(self, database: str) -> str:
        """The database a client must be opened against to work in ``database``.

        Backends that qualify the database per statement connect without one
        and return "" here.
        """
        return database

    def schema_for(self, database: str) -> str:
        """Schema used to list tables of ``database``."""
        return database

    @abstractmethod
    def connect(self, config: ConnectionConfig, database: str, password: str | None) -> Any:
        """Open a client against ``database`` ("" for the server default)."""

    def disconnect(self, conn: Any) -> None:
        """Close a connection if the driver exposes a close method."""
        close_fn = getattr(conn, "close", None)
        if callable(close_fn):
            close_fn()

    @abstractmethod
    def get_databases(self, conn: Any) -> list[str]:
        """All databases visible to the client, system databases included."""

    def list_databases(self, conn: Any, include_system: bool = False) -> list[str]:
        databases = self.get_databases(conn)
        if include_system:
            return databases
        hidden = self.system_databases
        return [db for db in databases if db.lower() not in hidden]

    @abstractmethod
    def get_tables(self, conn: Any, schema: str) -> list[str]:
        """Table names in ``schema``, sorted."""

    @abstractmethod
    def get_columns(self, conn: Any, table: str, schema: str) -> list[str]:
        """Column names of ``table`` in declaration order."""

    @abstractmethod
    def execute(self, conn: Any, statement: str) -> QueryResult:
        """Execute a single statement."""

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace('"', '""')
        return f'"{escaped}"'

    def select_table_query(self, table: str, limit: int, database: str | None = None) -> str:
        return f"SELECT * FROM {self.quote_identifier(table)} LIMIT {limit}"

    @abstractmethod
    def describe_table_query(self, table: str, schema: str | None = None) -> str:
        """Statement that lists the columns of ``table``."""


class CursorBasedAdapter(DatabaseAdapter):
    """Base class for adapters using DB-API cursors.

    Provides the common ``execute`` implementation.
    """

    def execute(self, conn: Any, statement: str) -> QueryResult:
        cursor = conn.cursor()
        try:
            cursor.execute(statement)
            if cursor.description:
                columns = [col[0] for col in cursor.description]
                return make_select_result(columns, cursor.fetchall())
            rowcount = max(int(cursor.rowcount), 0)
        finally:
            cursor.close()
        commit = getattr(conn, "commit", None)
        if callable(commit):
            commit()
        return ExecuteResult(rows_affected=rowcount)

    def _fetch_column(self, conn: Any, query: str, params: tuple = ()) -> list[str]:
        cursor = conn.cursor()
        try:
            if params:
                cursor.execute(query, params)
            else:
                cursor.execute(query)
            return [str(row[0]) for row in cursor.fetchall()]
        finally:
            cursor.close()
