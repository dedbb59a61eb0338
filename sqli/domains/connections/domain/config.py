"""Connection descriptors."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Mapping


class DatabaseType(str, Enum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    CLICKHOUSE = "clickhouse"
    SQLITE = "sqlite"


# Legacy and short names accepted in config files
DB_TYPE_ALIASES: dict[str, str] = {
    "postgres": "postgresql",
    "pg": "postgresql",
    "mariadb": "mysql",
    "my": "mysql",
    "ch": "clickhouse",
    "sq": "sqlite",
    "sqlite3": "sqlite",
}


def normalize_db_type(value: str) -> str:
    value = (value or "").strip().lower()
    return DB_TYPE_ALIASES.get(value, value)


@dataclass
class ConnectionConfig:
    """Database connection configuration."""

    name: str
    db_type: str = "postgresql"
    host: str = "localhost"
    port: int | None = None  # Default derived from the provider
    user: str = ""
    password: str | None = None
    # Shell command whose stdout is the password; wins over `password`
    password_cmd: str | None = None
    database: str | None = None
    # SQLite file path
    path: str | None = None
    tls: bool = False
    readonly: bool = False
    group: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ConnectionConfig:
        """Create a ConnectionConfig from a dict, with legacy key support."""
        payload = dict(data)

        if "server" in payload and "host" not in payload:
            payload["host"] = payload.pop("server")
        if "username" in payload and "user" not in payload:
            payload["user"] = payload.pop("username")
        if "file_path" in payload and "path" not in payload:
            payload["path"] = payload.pop("file_path")

        payload["db_type"] = normalize_db_type(str(payload.get("db_type") or "postgresql"))

        port = payload.get("port")
        if port in ("", None):
            payload["port"] = None
        else:
            payload["port"] = int(port)

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in payload.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value not in (None, "")}

    @property
    def is_file_based(self) -> bool:
        return self.db_type == DatabaseType.SQLITE.value

    @property
    def configured_database(self) -> str | None:
        """The database to connect to directly, skipping the database list."""
        if self.is_file_based:
            if not self.path:
                return None
            return os.path.basename(self.path) or self.path
        return self.database or None

    def display_target(self) -> str:
        if self.is_file_based:
            return self.path or ""
        target = self.host
        if self.port:
            target = f"{target}:{self.port}"
        if self.database:
            target = f"{target}/{self.database}"
        return target


def connection_groups(connections: list[ConnectionConfig]) -> list[str]:
    """Group names in order of appearance, with "All" first."""
    groups = ["All"]
    for config in connections:
        if config.group and config.group not in groups:
            groups.append(config.group)
    return groups


def filter_by_group(connections: list[ConnectionConfig], group: str) -> list[ConnectionConfig]:
    if group == "All":
        return list(connections)
    return [config for config in connections if config.group == group]
