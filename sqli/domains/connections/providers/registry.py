"""Provider registry and lazy loading for database adapters."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from importlib import import_module
from typing import TYPE_CHECKING, cast

from sqli.domains.connections.domain.config import DatabaseType, normalize_db_type

if TYPE_CHECKING:
    from sqli.domains.connections.providers.adapters.base import DatabaseAdapter


@dataclass(frozen=True)
class ProviderSpec:
    db_type: str
    display_name: str
    adapter_path: tuple[str, str]
    is_file_based: bool = False


_PACKAGE = "sqli.domains.connections.providers"

_PROVIDERS: dict[str, ProviderSpec] = {}


def register_provider(spec: ProviderSpec) -> None:
    """Register a provider specification."""
    _PROVIDERS[spec.db_type] = spec


register_provider(
    ProviderSpec(
        db_type=DatabaseType.POSTGRESQL.value,
        display_name="PostgreSQL",
        adapter_path=(f"{_PACKAGE}.postgresql.adapter", "PostgreSQLAdapter"),
    )
)
register_provider(
    ProviderSpec(
        db_type=DatabaseType.MYSQL.value,
        display_name="MySQL",
        adapter_path=(f"{_PACKAGE}.mysql.adapter", "MySQLAdapter"),
    )
)
register_provider(
    ProviderSpec(
        db_type=DatabaseType.CLICKHOUSE.value,
        display_name="ClickHouse",
        adapter_path=(f"{_PACKAGE}.clickhouse.adapter", "ClickHouseAdapter"),
    )
)
register_provider(
    ProviderSpec(
        db_type=DatabaseType.SQLITE.value,
        display_name="SQLite",
        adapter_path=(f"{_PACKAGE}.sqlite.adapter", "SQLiteAdapter"),
        is_file_based=True,
    )
)


def get_supported_db_types() -> list[str]:
    return list(_PROVIDERS)


def get_provider_spec(db_type: str) -> ProviderSpec:
    normalized = normalize_db_type(db_type)
    spec = _PROVIDERS.get(normalized)
    if spec is None:
        supported = ", ".join(sorted(_PROVIDERS))
        raise ValueError(f"Unsupported database type: '{db_type}'. Supported: {supported}")
    return spec


def get_display_name(db_type: str) -> str:
    try:
        return get_provider_spec(db_type).display_name
    except ValueError:
        return db_type


@lru_cache(maxsize=None)
def get_adapter(db_type: str) -> DatabaseAdapter:
    """Get the (cached) adapter instance for a database type."""
    module_name, class_name = get_provider_spec(db_type).adapter_path
    adapter_cls = getattr(import_module(module_name), class_name)
    return cast("DatabaseAdapter", adapter_cls())
