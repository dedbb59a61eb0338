"""Pane switching, help and popup routing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqli.core.keymap import KeyPress, help_lines
from sqli.domains.session.domain.popups import (
    CompletionPopup,
    ConfirmDeletePopup,
    HelpPopup,
    RecordDetailPopup,
    SaveTemplatePopup,
    TemplateListPopup,
)
from sqli.domains.session.domain.tab import Focus

from ..protocols import ControllerHost

if TYPE_CHECKING:
    from sqli.domains.session.domain.tab import Tab


class NavigationMixin:
    def handle_pane_key(self: ControllerHost, tab: Tab, key: KeyPress) -> None:
        """Second key of a Ctrl+W chord. Anything unmapped is swallowed."""
        name = key.name
        if name in ("h", "left"):
            tab.focus = Focus.SIDEBAR
        elif name in ("l", "right"):
            if tab.focus is Focus.SIDEBAR:
                tab.focus = Focus.QUERY
        elif name in ("k", "up"):
            if tab.focus is Focus.OUTPUT:
                tab.focus = Focus.QUERY
        elif name in ("j", "down"):
            if tab.focus is Focus.QUERY:
                tab.focus = Focus.OUTPUT
        elif name == "w":
            tab.focus = Focus.QUERY

    def handle_popup_key(self: ControllerHost, tab: Tab, key: KeyPress) -> None:
        popup = tab.popup
        if isinstance(popup, TemplateListPopup):
            self.handle_template_list_key(tab, popup, key)
        elif isinstance(popup, SaveTemplatePopup):
            self.handle_save_template_key(tab, popup, key)
        elif isinstance(popup, ConfirmDeletePopup):
            self.handle_confirm_delete_key(tab, popup, key)
        elif isinstance(popup, RecordDetailPopup):
            self.handle_record_detail_key(tab, popup, key)
        elif isinstance(popup, CompletionPopup):
            self.handle_completion_key(tab, popup, key)
        elif isinstance(popup, HelpPopup):
            self.handle_help_key(tab, popup, key)
        else:
            raise TypeError(f"Unknown popup: {popup!r}")

    def handle_help_key(self: ControllerHost, tab: Tab, popup: HelpPopup, key: KeyPress) -> None:
        name = key.name
        if name in ("escape", "q", "enter"):
            tab.popup = None
        elif name in ("j", "down"):
            popup.scroll = min(popup.scroll + 1, max(0, len(help_lines()) - 1))
        elif name in ("k", "up"):
            popup.scroll = max(popup.scroll - 1, 0)
