"""Main Textual application for sqli."""

from __future__ import annotations

import logging

from textual import events
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Static

from .core.keymap import KeyPress
from .domains.connections.domain.config import ConnectionConfig
from .domains.session.domain.tab import Focus, ViewState
from .domains.shell.app.controller import ShellController
from .domains.shell.ui.render import (
    render_connection_list,
    render_database_list,
    render_popup,
    render_query,
    render_results,
    render_sidebar,
    render_status,
    render_tab_bar,
)
from .shared.core.editor import edit
from .shared.core.errors import EditorError

logger = logging.getLogger(__name__)

TICK_INTERVAL = 0.05
# Results header line
RESULTS_CHROME_LINES = 1


class SqliApp(App, inherit_bindings=False):
    """Keyboard-driven SQL browser. All keys go to the controller."""

    TITLE = "sqli"
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    Screen {
        background: $surface;
        layers: base popup;
    }

    #tab-bar {
        height: 1;
        background: $surface-darken-1;
    }

    #list-view {
        height: 1fr;
        border: round $border;
        padding: 0 1;
    }

    #content {
        height: 1fr;
        display: none;
    }

    Screen.database-view #list-view {
        display: none;
    }

    Screen.database-view #content {
        display: block;
    }

    #sidebar {
        width: 35;
        border: round $border;
        padding: 0 1;
    }

    #main-panel {
        width: 1fr;
    }

    #query-area {
        height: 40%;
        border: round $border;
        padding: 0 1;
    }

    #results-area {
        height: 1fr;
        border: round $border;
        padding: 0 1;
    }

    #sidebar.active-pane,
    #query-area.active-pane,
    #results-area.active-pane {
        border: round $primary;
        border-title-color: $primary;
    }

    #sidebar,
    #query-area,
    #results-area {
        border-title-align: left;
        border-title-style: bold;
    }

    #popup {
        layer: popup;
        dock: bottom;
        offset-y: -2;
        margin: 0 4;
        max-height: 20;
        border: round $primary;
        background: $panel;
        padding: 0 1;
        display: none;
    }

    #popup.visible {
        display: block;
    }

    #status-bar {
        height: 1;
        background: $surface-darken-1;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        connections: list[ConnectionConfig],
        controller: ShellController | None = None,
    ) -> None:
        super().__init__()
        self.controller = controller or ShellController(connections, editor=self._run_editor)
        self._frame = 0

    def compose(self) -> ComposeResult:
        yield Static("", id="tab-bar")
        yield Static("", id="list-view")
        with Horizontal(id="content"):
            yield Static("", id="sidebar")
            with Vertical(id="main-panel"):
                yield Static("", id="query-area")
                yield Static("", id="results-area")
        yield Static("", id="popup")
        yield Static("", id="status-bar")

    def on_mount(self) -> None:
        self.query_one("#sidebar").border_title = "Databases"
        self.query_one("#query-area").border_title = "Query"
        self.query_one("#results-area").border_title = "Results"
        self.set_interval(TICK_INTERVAL, self._tick)
        self.refresh_view()

    def on_unmount(self) -> None:
        self.controller.close()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.controller.handle_key(KeyPress(event.key, event.character))
        if self.controller.should_quit:
            self.exit()
            return
        self.refresh_view()

    def on_resize(self, event: events.Resize) -> None:
        self.refresh_view()

    def _tick(self) -> None:
        tab = self.controller.tab
        changed = self.controller.tick()
        if tab.loading:
            self._frame += 1
        if changed or tab.loading:
            self.refresh_view()

    def _run_editor(self, text: str, extension: str) -> str:
        """Run the external editor with the terminal handed over to it."""
        try:
            with self.suspend():
                return edit(text, extension)
        except SuspendNotSupported as e:
            raise EditorError("External editor is not supported in this environment") from e

    def refresh_view(self) -> None:
        controller = self.controller
        tab = controller.tab

        self.query_one("#tab-bar", Static).update(render_tab_bar(controller))
        self.query_one("#status-bar", Static).update(render_status(controller, self._frame))

        database_view = tab.view is ViewState.DATABASE_VIEW
        self.screen.set_class(database_view, "database-view")

        if tab.view is ViewState.CONNECTION_LIST:
            list_view = self.query_one("#list-view", Static)
            list_view.border_title = "Connections"
            list_view.update(render_connection_list(tab))
        elif tab.view is ViewState.DATABASE_LIST:
            list_view = self.query_one("#list-view", Static)
            list_view.border_title = "Databases"
            list_view.update(render_database_list(tab))
        else:
            self._refresh_database_view()

        popup = self.query_one("#popup", Static)
        content = render_popup(controller, tab)
        popup.set_class(content is not None, "visible")
        if content is not None:
            popup.update(content)

    def _refresh_database_view(self) -> None:
        controller = self.controller
        tab = controller.tab
        sidebar = self.query_one("#sidebar", Static)
        query_area = self.query_one("#query-area", Static)
        results_area = self.query_one("#results-area", Static)

        sidebar.set_class(tab.focus is Focus.SIDEBAR, "active-pane")
        query_area.set_class(tab.focus is Focus.QUERY, "active-pane")
        results_area.set_class(tab.focus is Focus.OUTPUT, "active-pane")

        size = results_area.content_size
        if size.height > RESULTS_CHROME_LINES:
            controller.visible_height = size.height - RESULTS_CHROME_LINES
        if size.width > 0:
            controller.visible_width = size.width

        sidebar.update(render_sidebar(tab))
        query_area.update(render_query(tab))
        results_area.update(render_results(tab, controller.visible_height, controller.visible_width))
