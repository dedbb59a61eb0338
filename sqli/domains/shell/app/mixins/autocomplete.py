"""Completion popup for the query editor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqli.core.keymap import KeyPress
from sqli.domains.query.completion.engine import (
    ColumnContext,
    current_word,
    detect_context,
    get_suggestions,
    resolve_alias,
)
from sqli.domains.session.domain.popups import CompletionPopup

from ..protocols import ControllerHost

if TYPE_CHECKING:
    from sqli.domains.session.domain.tab import Tab

logger = logging.getLogger(__name__)


class AutocompleteMixin:
    def open_completion(self: ControllerHost, tab: Tab) -> None:
        text = tab.query.text
        cursor = tab.query.cursor_offset()
        word, start = current_word(text, cursor)
        context = detect_context(text, cursor)

        tables = tab.sidebar.all_tables(tab.current_database)
        columns: list[str] = []
        if isinstance(context, ColumnContext):
            columns = self.columns_for(tab, resolve_alias(text, context.table_or_alias))

        suggestions = get_suggestions(context, word, tables, columns)
        if not suggestions:
            tab.status = "No completions available"
            return
        tab.popup = CompletionPopup(suggestions=suggestions, selected=0, word_start=start)

    def columns_for(self: ControllerHost, tab: Tab, table: str) -> list[str]:
        """Column names of ``table``, fetched once per tab with the open client."""
        cached = tab.column_cache.get(table)
        if cached is not None:
            return cached
        entry = tab.client_cache.entry
        # The client may be in use by a worker while an operation is pending
        if entry is None or tab.pending is not None:
            return []
        database = tab.current_database or entry.database
        try:
            columns = entry.adapter.get_columns(entry.client, table, entry.adapter.schema_for(database))
        except Exception as e:
            logger.debug("Column lookup for %s failed", table, exc_info=True)
            tab.status = f"Failed to load columns: {e}"
            return []
        tab.column_cache[table] = columns
        return columns

    def handle_completion_key(self: ControllerHost, tab: Tab, popup: CompletionPopup, key: KeyPress) -> None:
        name = key.name
        if name == "escape" or key.is_ctrl_space:
            tab.popup = None
        elif name in ("enter", "tab"):
            tab.popup = None
            if popup.suggestions:
                suggestion = popup.suggestions[popup.selected]
                tab.query.replace_range(popup.word_start, tab.query.cursor_offset(), suggestion.text)
        elif name in ("j", "down"):
            popup.selected = min(popup.selected + 1, len(popup.suggestions) - 1)
        elif name in ("k", "up"):
            popup.selected = max(popup.selected - 1, 0)
        else:
            tab.popup = None
            self.handle_buffer_key(tab, key)
