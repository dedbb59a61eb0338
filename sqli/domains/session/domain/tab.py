"""Per-tab state."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from sqli.domains.connections.app.client_cache import ClientCache
from sqli.domains.connections.domain.config import ConnectionConfig, connection_groups, filter_by_group
from sqli.domains.explorer.domain.sidebar import SidebarState
from sqli.domains.query.domain.result import QueryResult
from sqli.domains.query.editing.buffer import QueryBuffer
from sqli.domains.results.domain.viewport import Viewport
from sqli.domains.session.domain.popups import PopupState

if TYPE_CHECKING:
    from sqli.domains.operations.app.lifecycle import PendingOperation

DEFAULT_TAB_NAME = "New"


class Mode(Enum):
    NORMAL = "normal"
    COMMAND = "command"


class ViewState(Enum):
    CONNECTION_LIST = "connection_list"
    DATABASE_LIST = "database_list"
    DATABASE_VIEW = "database_view"


class Focus(Enum):
    SIDEBAR = "sidebar"
    QUERY = "query"
    OUTPUT = "output"


@dataclass
class Tab:
    """One independent browsing session."""

    connections: list[ConnectionConfig] = field(default_factory=list)
    name: str = DEFAULT_TAB_NAME
    selected_connection: int = 0
    selected_group: int = 0
    view: ViewState = ViewState.CONNECTION_LIST
    focus: Focus = Focus.QUERY

    # Connection the open client belongs to
    active_connection: ConnectionConfig | None = None
    client_cache: ClientCache = field(default_factory=ClientCache)

    databases: list[str] = field(default_factory=list)
    selected_database: int = 0
    show_system_databases: bool = False
    current_database: str | None = None
    sidebar: SidebarState = field(default_factory=SidebarState)
    # table name -> column names, fetched for completion
    column_cache: dict[str, list[str]] = field(default_factory=dict)

    query: QueryBuffer = field(default_factory=QueryBuffer)
    result: QueryResult | None = None
    viewport: Viewport = field(default_factory=Viewport)

    pending_g: bool = False
    status: str | None = None
    loading: bool = False
    pending: PendingOperation | None = None
    popup: PopupState | None = None

    @classmethod
    def with_connections(cls, connections: list[ConnectionConfig]) -> Tab:
        return cls(connections=copy.deepcopy(connections))

    # Connection list

    def groups(self) -> list[str]:
        return connection_groups(self.connections)

    def current_group(self) -> str:
        groups = self.groups()
        return groups[min(self.selected_group, len(groups) - 1)]

    def visible_connections(self) -> list[ConnectionConfig]:
        return filter_by_group(self.connections, self.current_group())

    def selected_connection_config(self) -> ConnectionConfig | None:
        visible = self.visible_connections()
        if 0 <= self.selected_connection < len(visible):
            return visible[self.selected_connection]
        return None

    def move_connection(self, delta: int) -> None:
        count = len(self.visible_connections())
        if count:
            self.selected_connection = max(0, min(self.selected_connection + delta, count - 1))

    def cycle_group(self, delta: int) -> None:
        self.selected_group = (self.selected_group + delta) % len(self.groups())
        self.selected_connection = 0

    # Database list

    def move_database(self, delta: int) -> None:
        if self.databases:
            self.selected_database = max(0, min(self.selected_database + delta, len(self.databases) - 1))

    def selected_database_name(self) -> str | None:
        if 0 <= self.selected_database < len(self.databases):
            return self.databases[self.selected_database]
        return None

    # State helpers

    @property
    def is_connected(self) -> bool:
        return self.client_cache.is_connected() and self.active_connection is not None

    def reset_to_connection_list(self) -> None:
        self.view = ViewState.CONNECTION_LIST
        self.name = DEFAULT_TAB_NAME
        self.databases = []
        self.selected_database = 0

    def set_result(self, result: QueryResult) -> None:
        self.result = result
        self.viewport.load(result)

    def close(self) -> None:
        """Release the tab's client."""
        self.client_cache.clear()
