"""ClickHouse adapter using clickhouse-connect."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqli.domains.connections.providers.adapters.base import DatabaseAdapter
from sqli.domains.query.app.statements import leading_keyword
from sqli.domains.query.domain.result import ExecuteResult, QueryResult, make_select_result

if TYPE_CHECKING:
    from sqli.domains.connections.domain.config import ConnectionConfig

ROW_RETURNING_KEYWORDS = frozenset(["SELECT", "WITH", "SHOW", "DESCRIBE", "DESC", "EXPLAIN", "EXISTS"])


class ClickHouseAdapter(DatabaseAdapter):
    """Adapter for ClickHouse over its HTTP interface.

    clickhouse-connect is not a DB-API driver, so statements are routed to
    ``query`` or ``command`` depending on whether they return rows.
    """

    default_port = 8123

    @property
    def name(self) -> str:
        return "ClickHouse"

    @property
    def install_extra(self) -> str:
        return "clickhouse"

    @property
    def install_package(self) -> str:
        return "clickhouse-connect"

    @property
    def system_databases(self) -> frozenset[str]:
        return frozenset({"system", "information_schema"})

    def default_database(self) -> str:
        return "default"

    def connect(self, config: ConnectionConfig, database: str, password: str | None) -> Any:
        clickhouse_connect = self.import_driver("clickhouse_connect")

        port = int(config.port) if config.port else (8443 if config.tls else self.default_port)
        return clickhouse_connect.get_client(
            host=config.host,
            port=port,
            username=config.user or "default",
            password=password or "",
            database=database or self.default_database(),
            secure=config.tls,
            connect_timeout=10,
        )

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace("`", "\\`")
        return f"`{escaped}`"

    def get_databases(self, conn: Any) -> list[str]:
        result = conn.query("SELECT name FROM system.databases ORDER BY name")
        return [row[0] for row in result.result_rows]

    def get_tables(self, conn: Any, schema: str) -> list[str]:
        result = conn.query(
            "SELECT name FROM system.tables WHERE database = {db:String} ORDER BY name",
            parameters={"db": schema},
        )
        return [row[0] for row in result.result_rows]

    def get_columns(self, conn: Any, table: str, schema: str) -> list[str]:
        result = conn.query(
            "SELECT name FROM system.columns "
            "WHERE database = {db:String} AND table = {tbl:String} ORDER BY position",
            parameters={"db": schema, "tbl": table},
        )
        return [row[0] for row in result.result_rows]

    def execute(self, conn: Any, statement: str) -> QueryResult:
        if leading_keyword(statement) in ROW_RETURNING_KEYWORDS:
            result = conn.query(statement)
            return make_select_result(list(result.column_names), list(result.result_rows))
        summary = conn.command(statement)
        # command() only reports a summary for statements that write rows
        written = getattr(summary, "written_rows", 0) or 0
        return ExecuteResult(rows_affected=int(written))

    def select_table_query(self, table: str, limit: int, database: str | None = None) -> str:
        target = self.quote_identifier(table)
        if database:
            target = f"{self.quote_identifier(database)}.{target}"
        return f"SELECT * FROM {target} LIMIT {limit}"

    def describe_table_query(self, table: str, schema: str | None = None) -> str:
        target = self.quote_identifier(table)
        if schema:
            target = f"{self.quote_identifier(schema)}.{target}"
        return f"DESCRIBE TABLE {target}"
