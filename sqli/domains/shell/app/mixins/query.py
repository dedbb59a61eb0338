"""Query pane: editing, execution and the external editor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqli.core.keymap import KeyPress
from sqli.domains.connections.app.client_cache import validate_statements
from sqli.domains.operations.app.lifecycle import QueryOp, run_with_client
from sqli.domains.query.app.multi_statement import MultiStatementExecutor
from sqli.domains.query.app.statements import prepare_statements
from sqli.domains.session.domain.tab import Focus
from sqli.shared.core.errors import EditorError, ValidationError

from ..protocols import ControllerHost

if TYPE_CHECKING:
    from sqli.domains.session.domain.tab import Tab

logger = logging.getLogger(__name__)

# Keys passed straight to the buffer, by name
_BUFFER_MOTIONS = {
    "enter": "newline",
    "backspace": "backspace",
    "delete": "delete",
    "left": "move_left",
    "right": "move_right",
    "up": "move_up",
    "down": "move_down",
    "home": "move_home",
    "end": "move_end",
    "ctrl+left": "word_left",
    "ctrl+right": "word_right",
    "ctrl+k": "delete_to_line_end",
}


class QueryMixin:
    """Query editor keys and execution."""

    def handle_query_key(self: ControllerHost, tab: Tab, key: KeyPress) -> None:
        name = key.name
        if self.pending_escape:
            self.pending_escape = False
            if name == ":":
                self.enter_command_mode()
                return
            # Escape is dropped; the key is handled as usual

        if name == "escape":
            self.pending_escape = True
        elif name in ("f5", "ctrl+r"):
            self.execute_query(tab)
        elif name == "ctrl+o":
            self.open_template_list(tab)
        elif name == "ctrl+s":
            self.open_save_template(tab)
        elif name == "ctrl+g":
            self.edit_query_in_editor(tab)
        elif key.is_ctrl_space:
            self.open_completion(tab)
        elif name == "tab":
            tab.focus = Focus.OUTPUT
        elif name == "shift+tab":
            tab.focus = Focus.SIDEBAR
        else:
            self.handle_buffer_key(tab, key)

    def handle_buffer_key(self: ControllerHost, tab: Tab, key: KeyPress) -> None:
        char = key.printable
        if char is not None:
            tab.query.insert(char)
            return
        motion = _BUFFER_MOTIONS.get(key.key)
        if motion is not None:
            getattr(tab.query, motion)()

    def execute_query(self: ControllerHost, tab: Tab, *, focus_output: bool = False) -> None:
        """Validate the query text and run it in the background."""
        statements = prepare_statements(tab.query.text)
        if not statements:
            tab.status = "Query is empty"
            return
        config = tab.active_connection
        if config is None or not tab.is_connected:
            tab.status = "Not connected"
            return
        try:
            validate_statements(config, statements)
        except ValidationError as e:
            tab.status = str(e)
            return
        adapter = self.adapter_for(config)
        if adapter is None:
            return

        database = tab.current_database or tab.client_cache.database or ""
        request = tab.client_cache.request(config, database, adapter)

        def run(client):
            return MultiStatementExecutor(adapter, client).execute(statements)

        logger.debug("Executing %d statement(s) on %s/%s", len(statements), config.name, database)
        self.operations.begin(tab, QueryOp(focus_output=focus_output), run_with_client(request, run), "Executing query...")

    def edit_query_in_editor(self: ControllerHost, tab: Tab) -> None:
        try:
            text = self.editor(tab.query.text, "sql")
        except EditorError as e:
            logger.warning("Editor failed: %s", e)
            tab.status = f"Editor error: {e}"
            return
        tab.query.set_text(text.rstrip("\n"))
        tab.status = None
