"""Database/table tree shown in the sidebar."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class DatabaseItem:
    name: str


@dataclass(frozen=True)
class TableItem:
    database: str
    table: str


SidebarItem = Union[DatabaseItem, TableItem]


@dataclass
class SidebarState:
    """Flattened tree of databases and their tables.

    ``tables`` caches the table list of each database once loaded; a database
    is only listed again when the cache entry is dropped by ``refresh`` or
    ``prune``.
    """

    databases: list[str] = field(default_factory=list)
    tables: dict[str, list[str]] = field(default_factory=dict)
    expanded: set[str] = field(default_factory=set)
    selected: int = 0
    items: list[SidebarItem] = field(default_factory=list)

    def rebuild(self) -> None:
        items: list[SidebarItem] = []
        for database in self.databases:
            items.append(DatabaseItem(database))
            if database in self.expanded:
                items.extend(TableItem(database, table) for table in self.tables.get(database, []))
        self.items = items
        self.clamp_selection()

    def clamp_selection(self) -> None:
        if not self.items:
            self.selected = 0
        else:
            self.selected = max(0, min(self.selected, len(self.items) - 1))

    def set_databases(self, databases: list[str]) -> None:
        """Replace the database list, keeping cache and expansion for names that persist."""
        self.databases = list(databases)
        self.prune()
        self.rebuild()

    def prune(self) -> None:
        present = set(self.databases)
        self.expanded &= present
        self.tables = {db: tables for db, tables in self.tables.items() if db in present}

    def has_tables(self, database: str) -> bool:
        return database in self.tables

    def set_tables(self, database: str, tables: list[str], *, refresh: bool = False) -> bool:
        """Store the tables of ``database``; returns False if already cached and not refreshing."""
        if database in self.tables and not refresh:
            return False
        if database not in self.databases:
            self.databases.append(database)
        self.tables[database] = list(tables)
        self.rebuild()
        return True

    def expand(self, database: str) -> None:
        self.expanded.add(database)
        self.rebuild()

    def toggle(self, database: str) -> bool:
        """Toggle expansion; returns True if the database is now expanded."""
        if database in self.expanded:
            self.expanded.discard(database)
            expanded = False
        else:
            self.expanded.add(database)
            expanded = True
        self.rebuild()
        return expanded

    def invalidate(self, database: str) -> None:
        self.tables.pop(database, None)
        self.rebuild()

    def move(self, delta: int) -> None:
        if not self.items:
            return
        self.selected = max(0, min(self.selected + delta, len(self.items) - 1))

    def selected_item(self) -> SidebarItem | None:
        if 0 <= self.selected < len(self.items):
            return self.items[self.selected]
        return None

    def select_database(self, database: str) -> None:
        for index, item in enumerate(self.items):
            if isinstance(item, DatabaseItem) and item.name == database:
                self.selected = index
                return

    def all_tables(self, database: str | None) -> list[str]:
        if database is None:
            return []
        return list(self.tables.get(database, []))

    def clear(self) -> None:
        self.databases = []
        self.tables = {}
        self.expanded = set()
        self.selected = 0
        self.items = []
