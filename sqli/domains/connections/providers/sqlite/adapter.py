"""SQLite adapter using built-in sqlite3."""

from __future__ import annotations

import os
import sqlite3
from typing import TYPE_CHECKING, Any

from sqli.domains.connections.providers.adapters.base import CursorBasedAdapter, resolve_file_path
from sqli.shared.core.errors import DatabaseConnectionError

if TYPE_CHECKING:
    from sqli.domains.connections.domain.config import ConnectionConfig


class SQLiteAdapter(CursorBasedAdapter):
    """Adapter for SQLite using built-in sqlite3."""

    @property
    def name(self) -> str:
        return "SQLite"

    @property
    def supports_multiple_databases(self) -> bool:
        return False

    def connect(self, config: ConnectionConfig, database: str, password: str | None) -> Any:
        """Open the database file. ``database`` is the file's basename and is ignored."""
        if not config.path:
            raise DatabaseConnectionError(f"No file path configured for {config.name}")
        file_path = resolve_file_path(config.path)
        # check_same_thread=False allows the connection to be used from worker threads.
        # Only one operation per tab runs at a time, so access is serialized.
        return sqlite3.connect(file_path, check_same_thread=False)

    def get_databases(self, conn: Any) -> list[str]:
        cursor = conn.execute("PRAGMA database_list")
        names = []
        for _seq, name, file in cursor.fetchall():
            names.append(os.path.basename(file) if file else name)
        return names

    def get_tables(self, conn: Any, schema: str) -> list[str]:
        return self._fetch_column(
            conn,
            "SELECT name FROM sqlite_master WHERE type IN ('table', 'view') "
            "AND name NOT LIKE 'sqlite_%' ORDER BY name",
        )

    def get_columns(self, conn: Any, table: str, schema: str) -> list[str]:
        cursor = conn.execute(f"PRAGMA table_info({self.quote_identifier(table)})")
        # PRAGMA table_info returns: cid, name, type, notnull, dflt_value, pk
        return [row[1] for row in cursor.fetchall()]

    def describe_table_query(self, table: str, schema: str | None = None) -> str:
        return f"PRAGMA table_info({self.quote_identifier(table)})"
