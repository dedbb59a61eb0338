"""Connection list, database list and the connection flow."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqli.core.keymap import KeyPress
from sqli.domains.connections.domain.config import ConnectionConfig
from sqli.domains.connections.providers.adapters.base import DatabaseAdapter
from sqli.domains.connections.providers.registry import get_adapter
from sqli.domains.operations.app.lifecycle import (
    CONNECTION_TIMEOUT,
    ConnectOp,
    ListDatabasesOp,
    LoadTablesOp,
    run_with_client,
)
from sqli.domains.session.domain.tab import ViewState

from ..protocols import ControllerHost

if TYPE_CHECKING:
    from sqli.domains.session.domain.tab import Tab

logger = logging.getLogger(__name__)


class ConnectionMixin:
    """Picking a connection and a database, and loading the table tree."""

    def adapter_for(self: ControllerHost, config: ConnectionConfig) -> DatabaseAdapter | None:
        try:
            return get_adapter(config.db_type)
        except ValueError as e:
            self.tab.status = f"Connection failed: {e}"
            return None

    def handle_connection_list_key(self: ControllerHost, tab: Tab, key: KeyPress) -> None:
        name = key.name
        if name == ":":
            self.enter_command_mode()
        elif name in ("j", "down"):
            tab.move_connection(1)
        elif name in ("k", "up"):
            tab.move_connection(-1)
        elif name in ("h", "left"):
            tab.cycle_group(-1)
        elif name in ("l", "right"):
            tab.cycle_group(1)
        elif name == "t":
            self.session.new_tab()
        elif name == "enter":
            self.initiate_connection(tab)
        elif name == "escape":
            if not self.operations.cancel(tab):
                tab.loading = False
                tab.status = None

    def handle_database_list_key(self: ControllerHost, tab: Tab, key: KeyPress) -> None:
        name = key.name
        if name == ":":
            self.enter_command_mode()
        elif name in ("j", "down"):
            tab.move_database(1)
        elif name in ("k", "up"):
            tab.move_database(-1)
        elif name == "enter":
            database = tab.selected_database_name()
            config = tab.active_connection
            if database is not None and config is not None:
                self.connect_to_database(tab, config, database)
        elif name == "escape":
            if self.operations.cancel(tab):
                return
            if tab.is_connected and tab.current_database is not None:
                tab.view = ViewState.DATABASE_VIEW
            else:
                tab.reset_to_connection_list()

    def initiate_connection(self: ControllerHost, tab: Tab) -> None:
        """Connect straight to a configured database, or list databases first."""
        config = tab.selected_connection_config()
        if config is None:
            tab.status = "No connection selected"
            return
        database = config.configured_database
        if database:
            self.connect_to_database(tab, config, database)
        else:
            self.list_databases(tab, config)

    def list_databases(self: ControllerHost, tab: Tab, config: ConnectionConfig, *, refresh: bool = False) -> None:
        adapter = self.adapter_for(config)
        if adapter is None:
            return
        database = adapter.default_database()
        # Reuse the open client when re-listing the same connection
        active = tab.active_connection
        if active is not None and active.name == config.name and tab.client_cache.database is not None:
            database = tab.client_cache.database
        request = tab.client_cache.request(config, database, adapter)
        include_system = tab.show_system_databases

        def fetch(client):
            return adapter.list_databases(client, include_system=include_system)

        self.operations.begin(
            tab,
            ListDatabasesOp(config.name, refresh=refresh),
            run_with_client(request, fetch),
            "Refreshing..." if refresh else "Connecting...",
            timeout=CONNECTION_TIMEOUT,
        )

    def connect_to_database(self: ControllerHost, tab: Tab, config: ConnectionConfig, database: str) -> None:
        adapter = self.adapter_for(config)
        if adapter is None:
            return
        request = tab.client_cache.request(config, database, adapter)
        schema = adapter.schema_for(database)

        def fetch(client):
            return adapter.get_tables(client, schema)

        self.operations.begin(
            tab,
            ConnectOp(config.name, database),
            run_with_client(request, fetch),
            f"Connecting to {database}...",
            timeout=CONNECTION_TIMEOUT,
        )

    def load_tables(self: ControllerHost, tab: Tab, database: str, *, refresh: bool = False) -> None:
        config = tab.active_connection
        if config is None:
            tab.status = "Not connected"
            return
        adapter = self.adapter_for(config)
        if adapter is None:
            return
        request = tab.client_cache.request(config, database, adapter)
        schema = adapter.schema_for(database)

        def fetch(client):
            return adapter.get_tables(client, schema)

        self.operations.begin(
            tab,
            LoadTablesOp(database, refresh=refresh),
            run_with_client(request, fetch),
            f"Loading tables for {database}...",
        )

    def switch_database(self: ControllerHost, tab: Tab) -> None:
        config = tab.active_connection
        if config is None:
            tab.status = "Not connected"
            return
        self.list_databases(tab, config)

    def toggle_system_databases(self: ControllerHost, tab: Tab) -> None:
        if tab.view is not ViewState.DATABASE_LIST:
            tab.status = "Use :system from the database list"
            return
        tab.show_system_databases = not tab.show_system_databases
        logger.debug("System databases %s", "shown" if tab.show_system_databases else "hidden")
        if tab.active_connection is not None:
            self.list_databases(tab, tab.active_connection)
