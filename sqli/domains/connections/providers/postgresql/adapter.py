"""PostgreSQL adapter using psycopg2."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqli.domains.connections.providers.adapters.base import CursorBasedAdapter

if TYPE_CHECKING:
    from sqli.domains.connections.domain.config import ConnectionConfig


class PostgreSQLAdapter(CursorBasedAdapter):
    """Adapter for PostgreSQL using psycopg2."""

    default_port = 5432

    @property
    def name(self) -> str:
        return "PostgreSQL"

    @property
    def install_extra(self) -> str:
        return "postgres"

    @property
    def install_package(self) -> str:
        return "psycopg2-binary"

    @property
    def system_databases(self) -> frozenset[str]:
        return frozenset({"template0", "template1"})

    def default_database(self) -> str:
        return "postgres"

    def schema_for(self, database: str) -> str:
        return "public"

    def connect(self, config: ConnectionConfig, database: str, password: str | None) -> Any:
        psycopg2 = self.import_driver("psycopg2")

        conn = psycopg2.connect(
            host=config.host,
            port=int(config.port or self.default_port),
            database=database or self.default_database(),
            user=config.user,
            password=password,
            connect_timeout=10,
            sslmode="require" if config.tls else "prefer",
        )
        # Enable autocommit to avoid "transaction aborted" errors on failed statements
        conn.autocommit = True
        return conn

    def get_databases(self, conn: Any) -> list[str]:
        return self._fetch_column(conn, "SELECT datname FROM pg_database ORDER BY datname")

    def get_tables(self, conn: Any, schema: str) -> list[str]:
        return self._fetch_column(
            conn,
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = %s ORDER BY table_name",
            (schema or "public",),
        )

    def get_columns(self, conn: Any, table: str, schema: str) -> list[str]:
        return self._fetch_column(
            conn,
            "SELECT column_name FROM information_schema.columns "
            "WHERE table_schema = %s AND table_name = %s ORDER BY ordinal_position",
            (schema or "public", table),
        )

    def describe_table_query(self, table: str, schema: str | None = None) -> str:
        escaped_table = table.replace("'", "''")
        escaped_schema = (schema or "public").replace("'", "''")
        return (
            "SELECT column_name, data_type, is_nullable, column_default "
            "FROM information_schema.columns "
            f"WHERE table_schema = '{escaped_schema}' AND table_name = '{escaped_table}' "
            "ORDER BY ordinal_position"
        )
