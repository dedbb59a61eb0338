"""Modal input dispatcher.

The controller owns the session and turns key presses into state changes.
It never touches the terminal: the Textual app forwards keys to
``handle_key``, calls ``tick`` on a timer to apply finished background
operations, and renders whatever state the controller exposes.

Routing order for a key:

1. Command mode takes every key.
2. An open popup takes every key.
3. The tab's view decides: connection list, database list, or the
   database view, where Ctrl+W chords, cancellation and the focused pane
   are handled in that order.
"""

from __future__ import annotations

import logging
from typing import Callable

from sqli.core.keymap import KeyPress
from sqli.domains.connections.domain.config import ConnectionConfig
from sqli.domains.operations.app.lifecycle import OperationManager
from sqli.domains.session.app.registry import Session
from sqli.domains.session.domain.tab import Focus, Mode, Tab, ViewState
from sqli.domains.templates.store import TemplateStore
from sqli.shared.core.clipboard import copy_text
from sqli.shared.core.editor import edit

from .commands import CommandMixin
from .mixins import (
    AutocompleteMixin,
    ConnectionMixin,
    NavigationMixin,
    QueryMixin,
    ResultsMixin,
    SidebarMixin,
    TemplateMixin,
)

logger = logging.getLogger(__name__)

DEFAULT_VISIBLE_HEIGHT = 20
DEFAULT_VISIBLE_WIDTH = 80


class ShellController(
    ConnectionMixin,
    SidebarMixin,
    QueryMixin,
    AutocompleteMixin,
    TemplateMixin,
    ResultsMixin,
    NavigationMixin,
    CommandMixin,
):
    """Session state plus the key dispatcher."""

    def __init__(
        self,
        connections: list[ConnectionConfig],
        *,
        operations: OperationManager | None = None,
        templates: TemplateStore | None = None,
        editor: Callable[[str, str], str] = edit,
        clipboard: Callable[[str], bool] = copy_text,
    ) -> None:
        self.session = Session(connections)
        self.operations = operations or OperationManager()
        self.templates = templates if templates is not None else TemplateStore.get_instance()
        self.editor = editor
        self.clipboard = clipboard

        self.mode = Mode.NORMAL
        self.command_buffer = ""
        self.pending_ctrl_w = False
        self.pending_escape = False
        self.should_quit = False

        # Result grid size in rows and cells, set by the renderer
        self.visible_height = DEFAULT_VISIBLE_HEIGHT
        self.visible_width = DEFAULT_VISIBLE_WIDTH

    @property
    def tab(self) -> Tab:
        return self.session.current_tab

    def handle_key(self, key: KeyPress) -> None:
        if self.mode is Mode.COMMAND:
            self.handle_command_key(key)
            return

        tab = self.tab
        if tab.popup is not None:
            self.handle_popup_key(tab, key)
            return

        view = tab.view
        if view is ViewState.CONNECTION_LIST:
            self.handle_connection_list_key(tab, key)
        elif view is ViewState.DATABASE_LIST:
            self.handle_database_list_key(tab, key)
        elif view is ViewState.DATABASE_VIEW:
            self.handle_database_view_key(tab, key)
        else:
            raise TypeError(f"Unknown view: {view!r}")

    def handle_database_view_key(self, tab: Tab, key: KeyPress) -> None:
        if self.pending_ctrl_w:
            self.pending_ctrl_w = False
            self.handle_pane_key(tab, key)
            return
        if key.name == "ctrl+w":
            self.pending_ctrl_w = True
            self.pending_escape = False
            return

        if key.name == "escape" and tab.pending is not None:
            self.pending_escape = False
            self.operations.cancel(tab)
            return

        focus = tab.focus
        if focus is not Focus.QUERY:
            self.pending_escape = False

        if focus is Focus.SIDEBAR:
            self.handle_sidebar_key(tab, key)
        elif focus is Focus.QUERY:
            self.handle_query_key(tab, key)
        elif focus is Focus.OUTPUT:
            self.handle_output_key(tab, key)
        else:
            raise TypeError(f"Unknown focus: {focus!r}")

    def tick(self) -> bool:
        """Apply finished operations on every tab. Returns True if anything changed."""
        changed = False
        for tab in self.session.tabs:
            if self.operations.poll(tab):
                changed = True
        return changed

    def close(self) -> None:
        """Release clients and stop background workers."""
        for tab in self.session.tabs:
            self.operations.cancel(tab)
        self.session.close_all()
        self.operations.shutdown()
        logger.debug("Controller closed")
