"""Sidebar (database/table tree) keys."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqli.core.keymap import KeyPress
from sqli.domains.explorer.domain.sidebar import DatabaseItem, TableItem
from sqli.domains.session.domain.tab import Focus

from ..protocols import ControllerHost

if TYPE_CHECKING:
    from sqli.domains.session.domain.tab import Tab

PREVIEW_ROW_LIMIT = 50


class SidebarMixin:
    def handle_sidebar_key(self: ControllerHost, tab: Tab, key: KeyPress) -> None:
        name = key.name
        if name == ":":
            self.enter_command_mode()
        elif name in ("j", "down"):
            tab.sidebar.move(1)
        elif name in ("k", "up"):
            tab.sidebar.move(-1)
        elif name in ("tab", "l", "right"):
            tab.focus = Focus.QUERY
        elif name == "shift+tab":
            tab.focus = Focus.OUTPUT
        elif name == "enter":
            self.activate_sidebar_item(tab)
        elif name == "d":
            self.describe_selected_table(tab)
        elif name == "r":
            if tab.active_connection is None:
                tab.status = "Not connected"
            else:
                self.list_databases(tab, tab.active_connection, refresh=True)
        elif name == "f5":
            self.execute_query(tab)

    def activate_sidebar_item(self: ControllerHost, tab: Tab) -> None:
        """Toggle a database (loading its tables once) or preview a table."""
        item = tab.sidebar.selected_item()
        if item is None:
            return
        if isinstance(item, DatabaseItem):
            expanded = tab.sidebar.toggle(item.name)
            _select_database(tab, item.name)
            if expanded and not tab.sidebar.has_tables(item.name):
                self.load_tables(tab, item.name)
        elif isinstance(item, TableItem):
            config = tab.active_connection
            adapter = self.adapter_for(config) if config is not None else None
            if adapter is None:
                tab.status = "Not connected"
                return
            _select_database(tab, item.database)
            tab.query.set_text(adapter.select_table_query(item.table, PREVIEW_ROW_LIMIT, item.database))
            self.execute_query(tab, focus_output=True)
        else:
            raise TypeError(f"Unknown sidebar item: {item!r}")

    def describe_selected_table(self: ControllerHost, tab: Tab) -> None:
        item = tab.sidebar.selected_item()
        if not isinstance(item, TableItem):
            return
        config = tab.active_connection
        adapter = self.adapter_for(config) if config is not None else None
        if adapter is None:
            tab.status = "Not connected"
            return
        _select_database(tab, item.database)
        tab.query.set_text(adapter.describe_table_query(item.table, adapter.schema_for(item.database)))
        self.execute_query(tab)


def _select_database(tab: Tab, database: str) -> None:
    if tab.current_database == database:
        return
    tab.current_database = database
    tab.column_cache.clear()
    if tab.active_connection is not None:
        tab.name = f"{tab.active_connection.name}/{database}"
