"""Connection URL parsing for sqli.

Parses ``<type>://[user[:pass]@]host[:port][/database]`` into ConnectionConfig
objects. Examples:
    pg://postgres:secret@localhost:5432/mydb
    pgs://postgres@secure.example.com/mydb   (TLS)
    my://root@localhost:3306
    ch://default@localhost/default
    sq:///path/to/database.db
    sq://./local.db
"""

from __future__ import annotations

import os
from urllib.parse import ParseResult, unquote, urlparse

from sqli.domains.connections.domain.config import ConnectionConfig, DatabaseType

# scheme -> (db_type, tls)
SCHEME_TO_DB_TYPE: dict[str, tuple[str, bool]] = {
    "pg": (DatabaseType.POSTGRESQL.value, False),
    "postgres": (DatabaseType.POSTGRESQL.value, False),
    "postgresql": (DatabaseType.POSTGRESQL.value, False),
    "pgs": (DatabaseType.POSTGRESQL.value, True),
    "postgress": (DatabaseType.POSTGRESQL.value, True),
    "postgresqls": (DatabaseType.POSTGRESQL.value, True),
    "my": (DatabaseType.MYSQL.value, False),
    "mysql": (DatabaseType.MYSQL.value, False),
    "mariadb": (DatabaseType.MYSQL.value, False),
    "mys": (DatabaseType.MYSQL.value, True),
    "mysqls": (DatabaseType.MYSQL.value, True),
    "mariadbs": (DatabaseType.MYSQL.value, True),
    "ch": (DatabaseType.CLICKHOUSE.value, False),
    "chh": (DatabaseType.CLICKHOUSE.value, False),
    "clickhouse": (DatabaseType.CLICKHOUSE.value, False),
    "chs": (DatabaseType.CLICKHOUSE.value, True),
    "chhs": (DatabaseType.CLICKHOUSE.value, True),
    "clickhouses": (DatabaseType.CLICKHOUSE.value, True),
    "sq": (DatabaseType.SQLITE.value, False),
    "sqlite": (DatabaseType.SQLITE.value, False),
    "sqlite3": (DatabaseType.SQLITE.value, False),
}

DEFAULT_USERS: dict[str, str] = {
    DatabaseType.POSTGRESQL.value: "postgres",
    DatabaseType.MYSQL.value: "root",
    DatabaseType.CLICKHOUSE.value: "default",
}


def is_connection_url(arg: str) -> bool:
    """Check if an argument looks like a connection URL."""
    if "://" not in arg:
        return False
    scheme = arg.split("://", 1)[0].lower()
    return scheme in SCHEME_TO_DB_TYPE


def parse_connection_url(url: str, *, name: str | None = None) -> ConnectionConfig:
    """Parse a connection URL into a ConnectionConfig.

    Raises:
        ValueError: If the URL scheme is not supported or the URL is malformed
    """
    if "://" not in url:
        raise ValueError("Invalid URL: missing '://' separator")

    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme not in SCHEME_TO_DB_TYPE:
        raise ValueError(
            f"Unknown database type: '{parsed.scheme}'. Use pg, my, ch, or sq (add 's' for TLS)"
        )
    db_type, tls = SCHEME_TO_DB_TYPE[scheme]

    if db_type == DatabaseType.SQLITE.value:
        return _parse_file_based_url(parsed, name)
    return _parse_server_based_url(parsed, db_type, tls, name)


def _parse_file_based_url(parsed: ParseResult, name: str | None) -> ConnectionConfig:
    file_path = parsed.path
    # sq://./relative/path.db puts "." in the netloc
    if parsed.netloc:
        file_path = parsed.netloc + file_path
    if not file_path:
        raise ValueError("SQLite requires a file path")

    return ConnectionConfig(
        name=name or os.path.basename(file_path) or file_path,
        db_type=DatabaseType.SQLITE.value,
        host="",
        path=file_path,
    )


def _parse_server_based_url(
    parsed: ParseResult,
    db_type: str,
    tls: bool,
    name: str | None,
) -> ConnectionConfig:
    hostname = parsed.hostname or "localhost"

    if parsed.username:
        user = unquote(parsed.username)
        password = unquote(parsed.password) if parsed.password is not None else None
    else:
        user = DEFAULT_USERS.get(db_type, "")
        password = None

    try:
        port = parsed.port
    except ValueError as e:
        raise ValueError(f"Invalid port in URL: {e}") from e

    database = parsed.path.lstrip("/") or None

    if name is None:
        name = f"{user}@{hostname}/{database}" if database else f"{user}@{hostname}"

    return ConnectionConfig(
        name=name,
        db_type=db_type,
        host=hostname,
        port=port,
        user=user,
        password=password,
        database=database,
        tls=tls,
    )
