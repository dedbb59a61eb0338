"""Per-tab client cache and connection resolver.

A tab keeps at most one open client together with the database it was
opened against. Before each backend call the target database is resolved
through the adapter; the cached client is reused when the target matches,
otherwise a new client is opened (on the worker thread) and swapped into the
cache when the operation's result is applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from sqli.domains.connections.app.credentials import resolve_password
from sqli.domains.connections.domain.config import ConnectionConfig
from sqli.domains.connections.providers.adapters.base import DatabaseAdapter
from sqli.domains.connections.providers.registry import get_adapter
from sqli.domains.query.app.statements import is_read_query
from sqli.shared.core.errors import DatabaseConnectionError, SqliError, ValidationError

logger = logging.getLogger(__name__)

READ_ONLY_MESSAGE = "Connection is read-only, only select queries allowed"


@dataclass(frozen=True)
class CachedClient:
    client: Any
    connection_name: str
    database: str
    adapter: DatabaseAdapter


@dataclass
class ClientRequest:
    """A client needed by an operation, resolved on the UI thread.

    ``cached`` is set when the tab's client can be reused; otherwise
    ``obtain`` opens a new one on the worker thread.
    """

    config: ConnectionConfig
    adapter: DatabaseAdapter
    target: str
    cached: Any = None

    @property
    def reuses_cached(self) -> bool:
        return self.cached is not None

    def obtain(self) -> Any:
        if self.cached is not None:
            return self.cached
        return open_client(self.config, self.adapter, self.target)


def open_client(config: ConnectionConfig, adapter: DatabaseAdapter, target: str) -> Any:
    """Open a client, normalizing driver errors into DatabaseConnectionError."""
    logger.info("Opening %s client for %s (database=%r)", adapter.name, config.name, target)
    password = resolve_password(config)
    try:
        return adapter.connect(config, target, password)
    except SqliError:
        raise
    except Exception as e:
        raise DatabaseConnectionError(str(e)) from e


def resolve_target(adapter: DatabaseAdapter, database: str) -> str:
    """Database a client must be opened against for work in ``database``."""
    return adapter.connect_database(database)


class ClientCache:
    """Holds the tab's open client."""

    def __init__(self) -> None:
        self._entry: CachedClient | None = None

    @property
    def entry(self) -> CachedClient | None:
        return self._entry

    @property
    def client(self) -> Any:
        return self._entry.client if self._entry else None

    @property
    def database(self) -> str | None:
        return self._entry.database if self._entry else None

    def is_connected(self) -> bool:
        return self._entry is not None

    def lookup(self, connection_name: str, target: str) -> Any:
        """Return the cached client if it was opened against ``target``."""
        entry = self._entry
        if entry is not None and entry.connection_name == connection_name and entry.database == target:
            return entry.client
        return None

    def request(
        self,
        config: ConnectionConfig,
        database: str,
        adapter: DatabaseAdapter | None = None,
    ) -> ClientRequest:
        adapter = adapter or get_adapter(config.db_type)
        target = resolve_target(adapter, database)
        cached = self.lookup(config.name, target)
        if cached is not None:
            logger.debug("Reusing client for %s (database=%r)", config.name, target)
        return ClientRequest(config=config, adapter=adapter, target=target, cached=cached)

    def replace(self, entry: CachedClient) -> None:
        """Install ``entry``, closing the previous client if it differs."""
        old = self._entry
        self._entry = entry
        if old is not None and old.client is not entry.client:
            _close_quietly(old)

    def get_or_open(
        self,
        config: ConnectionConfig,
        database: str,
        adapter: DatabaseAdapter | None = None,
        opener: Callable[[ConnectionConfig, DatabaseAdapter, str], Any] = open_client,
    ) -> Any:
        """Synchronous reuse-or-open, for callers already off the UI thread."""
        request = self.request(config, database, adapter)
        if request.cached is not None:
            return request.cached
        client = opener(config, request.adapter, request.target)
        self.replace(CachedClient(client, config.name, request.target, request.adapter))
        return client

    def clear(self) -> None:
        old = self._entry
        self._entry = None
        if old is not None:
            _close_quietly(old)


def _close_quietly(entry: CachedClient) -> None:
    try:
        entry.adapter.disconnect(entry.client)
    except Exception:
        logger.debug("Error closing client for %s", entry.connection_name, exc_info=True)


def validate_statements(config: ConnectionConfig, statements: list[str]) -> None:
    """Reject writes on read-only connections before any I/O."""
    if not config.readonly:
        return
    for statement in statements:
        if not is_read_query(statement):
            raise ValidationError(READ_ONLY_MESSAGE)
