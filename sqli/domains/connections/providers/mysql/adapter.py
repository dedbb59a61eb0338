"""MySQL/MariaDB adapter using PyMySQL."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqli.domains.connections.providers.adapters.base import CursorBasedAdapter

if TYPE_CHECKING:
    from sqli.domains.connections.domain.config import ConnectionConfig


class MySQLAdapter(CursorBasedAdapter):
    """Adapter for MySQL and MariaDB using PyMySQL."""

    default_port = 3306

    @property
    def name(self) -> str:
        return "MySQL"

    @property
    def install_extra(self) -> str:
        return "mysql"

    @property
    def install_package(self) -> str:
        return "PyMySQL"

    @property
    def system_databases(self) -> frozenset[str]:
        return frozenset({"information_schema", "mysql", "performance_schema", "sys"})

    def connect(self, config: ConnectionConfig, database: str, password: str | None) -> Any:
        pymysql = self.import_driver("pymysql")

        kwargs: dict[str, Any] = {}
        if config.tls:
            kwargs["ssl"] = {"check_hostname": False}
        return pymysql.connect(
            host=config.host,
            port=int(config.port or self.default_port),
            database=database or None,
            user=config.user,
            password=password or "",
            connect_timeout=10,
            autocommit=True,
            charset="utf8mb4",
            **kwargs,
        )

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace("`", "``")
        return f"`{escaped}`"

    def get_databases(self, conn: Any) -> list[str]:
        return self._fetch_column(conn, "SHOW DATABASES")

    def get_tables(self, conn: Any, schema: str) -> list[str]:
        return self._fetch_column(
            conn,
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = %s ORDER BY table_name",
            (schema,),
        )

    def get_columns(self, conn: Any, table: str, schema: str) -> list[str]:
        return self._fetch_column(
            conn,
            "SELECT column_name FROM information_schema.columns "
            "WHERE table_schema = %s AND table_name = %s ORDER BY ordinal_position",
            (schema, table),
        )

    def describe_table_query(self, table: str, schema: str | None = None) -> str:
        return f"DESCRIBE {self.quote_identifier(table)}"
