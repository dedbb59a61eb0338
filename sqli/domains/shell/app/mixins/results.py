"""Result grid keys, record detail and yank."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqli.core.keymap import KeyPress
from sqli.domains.query.domain.result import SelectResult
from sqli.domains.session.domain.popups import RecordDetailPopup
from sqli.domains.session.domain.tab import Focus

from ..protocols import ControllerHost

if TYPE_CHECKING:
    from sqli.domains.session.domain.tab import Tab

PAGE_SIZE = 10


class ResultsMixin:
    def handle_output_key(self: ControllerHost, tab: Tab, key: KeyPress) -> None:
        name = key.name
        viewport = tab.viewport

        if tab.pending_g:
            tab.pending_g = False
            if name == "g":
                viewport.scroll_to_start()
            return

        if name == ":":
            self.enter_command_mode()
        elif name == "tab":
            tab.focus = Focus.SIDEBAR
        elif name == "shift+tab":
            tab.focus = Focus.QUERY
        elif name in ("j", "down"):
            viewport.move_cursor(1, self.visible_height)
        elif name in ("k", "up"):
            viewport.move_cursor(-1, self.visible_height)
        elif name == "pagedown":
            viewport.move_cursor(PAGE_SIZE, self.visible_height)
        elif name == "pageup":
            viewport.move_cursor(-PAGE_SIZE, self.visible_height)
        elif name in ("h", "left"):
            viewport.move_column(-1, self.visible_width)
        elif name in ("l", "right"):
            viewport.move_column(1, self.visible_width)
        elif name in ("0", "^", "home"):
            viewport.first_column()
        elif name in ("$", "end"):
            viewport.last_column(self.visible_width)
        elif name == "g":
            tab.pending_g = True
        elif name == "G":
            viewport.scroll_to_end()
        elif name == "v":
            viewport.toggle_cell_selection()
        elif name == "V":
            viewport.toggle_line_selection()
        elif name == "y":
            self.yank_selection(tab)
        elif name == "escape":
            viewport.clear_selection()
        elif name == "enter":
            if isinstance(tab.result, SelectResult) and tab.result.rows:
                tab.popup = RecordDetailPopup(row=viewport.cursor)
        elif name == "f5":
            self.execute_query(tab)

    def yank_selection(self: ControllerHost, tab: Tab) -> None:
        """Copy the visual selection, or the current cell, as tab-separated text."""
        result = tab.result
        if not isinstance(result, SelectResult) or not result.rows:
            tab.status = "Nothing to copy"
            return
        viewport = tab.viewport
        first, last = viewport.row_range()
        text = viewport.selected_text(result)
        if not self.clipboard(text):
            tab.status = "Clipboard unavailable (install pyperclip)"
            return
        viewport.clear_selection()
        tab.status = f"Copied {last - first + 1} row(s)"

    def handle_record_detail_key(self: ControllerHost, tab: Tab, popup: RecordDetailPopup, key: KeyPress) -> None:
        name = key.name
        result = tab.result
        last = result.column_count - 1 if isinstance(result, SelectResult) else 0
        if name == "escape":
            tab.popup = None
            return
        if name in ("j", "down"):
            field = popup.selected_field + 1
        elif name in ("k", "up"):
            field = popup.selected_field - 1
        elif name == "pagedown":
            field = popup.selected_field + PAGE_SIZE
        elif name == "pageup":
            field = popup.selected_field - PAGE_SIZE
        elif name == "g":
            field = 0
        elif name == "G":
            field = last
        else:
            return
        popup.selected_field = max(0, min(field, last))
