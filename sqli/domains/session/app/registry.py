"""Ordered collection of tabs with a current index."""

from __future__ import annotations

from sqli.domains.connections.domain.config import ConnectionConfig
from sqli.domains.session.domain.tab import Tab


class Session:
    """Owns every tab. The current index is valid whenever tabs exist."""

    def __init__(self, connections: list[ConnectionConfig]) -> None:
        self.tabs: list[Tab] = [Tab.with_connections(connections)]
        self.current: int = 0

    @property
    def current_tab(self) -> Tab:
        return self.tabs[self.current]

    def new_tab(self) -> Tab:
        """Open a tab with the first tab's connections and make it current."""
        seed = self.tabs[0].connections if self.tabs else []
        tab = Tab.with_connections(seed)
        self.tabs.append(tab)
        self.current = len(self.tabs) - 1
        return tab

    def next_tab(self) -> None:
        if self.tabs:
            self.current = (self.current + 1) % len(self.tabs)

    def previous_tab(self) -> None:
        if self.tabs:
            self.current = (self.current - 1) % len(self.tabs)

    def close_current_tab(self) -> bool:
        """Close the current tab. Returns True when it was the last one and the app should quit."""
        if len(self.tabs) <= 1:
            return True
        tab = self.tabs.pop(self.current)
        tab.close()
        self.current = min(self.current, len(self.tabs) - 1)
        return False

    def close_all(self) -> None:
        for tab in self.tabs:
            tab.close()
