"""Connection store for managing saved database connections."""

from __future__ import annotations

import logging
from pathlib import Path

from sqli.domains.connections.domain.config import ConnectionConfig, DatabaseType
from sqli.shared.core.errors import StorageError
from sqli.shared.core.store import CONFIG_DIR, JSONFileStore

logger = logging.getLogger(__name__)


def default_connections() -> list[ConnectionConfig]:
    return [
        ConnectionConfig(
            name="localhost",
            db_type=DatabaseType.POSTGRESQL.value,
            host="localhost",
            port=5432,
            user="postgres",
        )
    ]


class ConnectionStore(JSONFileStore):
    """Store for saved database connections.

    Connections are stored as a JSON array in ~/.sqli/connections.json, or in
    the file given with ``--config``.
    """

    _instance: ConnectionStore | None = None

    def __init__(self, file_path: Path | None = None) -> None:
        super().__init__(file_path or CONFIG_DIR / "connections.json")

    @classmethod
    def get_instance(cls) -> ConnectionStore:
        """Get the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (useful for testing)."""
        cls._instance = None

    def load_all(self) -> list[ConnectionConfig]:
        """Load all saved connections.

        Returns the built-in localhost connection when nothing is saved.
        Entries that cannot be parsed are skipped.
        """
        data = self._read_json()
        if data is None:
            return default_connections()
        if isinstance(data, dict):
            data = data.get("connections", [])
        if not isinstance(data, list):
            raise StorageError(f"Invalid connections file: {self.file_path}")

        configs = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            try:
                configs.append(ConnectionConfig.from_dict(entry))
            except (TypeError, ValueError) as e:
                logger.warning("Skipping invalid connection entry %r: %s", entry.get("name"), e)
        return configs or default_connections()

    def save_all(self, connections: list[ConnectionConfig]) -> None:
        self._write_json([config.to_dict() for config in connections])


def load_connections(path: Path | None = None) -> list[ConnectionConfig]:
    """Load saved connections from the config file."""
    if path is not None:
        store = ConnectionStore(path)
        if not store.exists():
            raise StorageError(f"Config file not found: {path}")
        return store.load_all()
    return ConnectionStore.get_instance().load_all()


def save_connections(connections: list[ConnectionConfig], path: Path | None = None) -> None:
    """Save connections to the config file."""
    store = ConnectionStore(path) if path is not None else ConnectionStore.get_instance()
    store.save_all(connections)
