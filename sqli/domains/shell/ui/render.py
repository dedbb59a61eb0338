"""Rendering helpers: controller state to rich renderables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.text import Text

from sqli.core.keymap import STATUS_HELP, help_lines
from sqli.domains.connections.providers.registry import get_display_name
from sqli.domains.explorer.domain.sidebar import DatabaseItem, TableItem
from sqli.domains.query.domain.result import ExecuteResult, SelectResult
from sqli.domains.session.domain.popups import (
    CompletionPopup,
    ConfirmDeletePopup,
    HelpPopup,
    RecordDetailPopup,
    SaveTemplatePopup,
    TemplateListPopup,
)
from sqli.domains.session.domain.tab import Focus, Mode

if TYPE_CHECKING:
    from sqli.domains.session.domain.tab import Tab
    from sqli.domains.shell.app.controller import ShellController

SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]

SELECTED = "reverse"
ACCENT = "bold cyan"
DIM = "dim"


def _fit(value: str, width: int) -> str:
    """Pad or truncate ``value`` to exactly ``width`` cells."""
    if width <= 0:
        return ""
    if len(value) > width:
        return value[: max(0, width - 1)] + "…"
    return value.ljust(width)


def render_tab_bar(controller: ShellController) -> Text:
    text = Text()
    for index, tab in enumerate(controller.session.tabs):
        label = f" {index + 1}:{tab.name} "
        text.append(label, style=SELECTED if index == controller.session.current else DIM)
        text.append(" ")
    return text


def render_connection_list(tab: Tab) -> Text:
    text = Text()
    groups = tab.groups()
    if len(groups) > 1:
        for index, group in enumerate(groups):
            text.append(f" {group} ", style=SELECTED if index == tab.selected_group else DIM)
        text.append("\n\n")
    connections = tab.visible_connections()
    if not connections:
        text.append("No connections configured.", style=DIM)
        return text
    for index, config in enumerate(connections):
        style = SELECTED if index == tab.selected_connection else ""
        flags = " [ro]" if config.readonly else ""
        line = f"{config.name:<24} {get_display_name(config.db_type):<12} {config.display_target()}{flags}"
        text.append(line, style=style)
        text.append("\n")
    return text


def render_database_list(tab: Tab) -> Text:
    text = Text(f"Databases on {tab.name}", style=ACCENT)
    if tab.show_system_databases:
        text.append("  (including system)", style=DIM)
    text.append("\n\n")
    if not tab.databases:
        text.append("No databases found.", style=DIM)
        return text
    for index, database in enumerate(tab.databases):
        marker = "* " if database == tab.current_database else "  "
        style = SELECTED if index == tab.selected_database else ""
        text.append(f"{marker}{database}", style=style)
        text.append("\n")
    return text


def render_sidebar(tab: Tab) -> Text:
    text = Text()
    focused = tab.focus is Focus.SIDEBAR
    for index, item in enumerate(tab.sidebar.items):
        style = SELECTED if focused and index == tab.sidebar.selected else ""
        if isinstance(item, DatabaseItem):
            icon = "▾ " if item.name in tab.sidebar.expanded else "▸ "
            if item.name == tab.current_database:
                style = f"{style} bold".strip()
            text.append(f"{icon}{item.name}", style=style)
        elif isinstance(item, TableItem):
            text.append(f"    {item.table}", style=style)
        else:
            raise TypeError(f"Unknown sidebar item: {item!r}")
        text.append("\n")
    return text


def render_query(tab: Tab) -> Text:
    """The query buffer, with a block cursor when the pane is focused."""
    buffer = tab.query
    focused = tab.focus is Focus.QUERY
    text = Text()
    for row, line in enumerate(buffer.lines):
        if focused and row == buffer.row:
            col = buffer.col
            text.append(line[:col])
            text.append(line[col : col + 1] or " ", style=SELECTED)
            text.append(line[col + 1 :])
        else:
            text.append(line)
        if row < len(buffer.lines) - 1:
            text.append("\n")
    return text


def visible_columns(widths: list[int], h_scroll: int, visible_width: int) -> list[int]:
    """Indexes of the columns that intersect [h_scroll, h_scroll + visible_width)."""
    indexes = []
    start = 0
    for index, width in enumerate(widths):
        end = start + width
        if end > h_scroll and start < h_scroll + visible_width:
            indexes.append(index)
        start = end
    return indexes


def render_results(tab: Tab, visible_height: int, visible_width: int) -> Text:
    result = tab.result
    if result is None:
        return Text("No results", style=DIM)
    if isinstance(result, ExecuteResult):
        return Text(f"{result.rows_affected} row(s) affected")
    if not isinstance(result, SelectResult):
        raise TypeError(f"Unknown query result: {result!r}")

    viewport = tab.viewport
    focused = tab.focus is Focus.OUTPUT
    columns = visible_columns(viewport.widths, viewport.h_scroll, visible_width)

    text = Text()
    for col in columns:
        text.append(_fit(result.columns[col], viewport.widths[col]), style=ACCENT)
    text.append("\n")

    last = min(result.row_count, viewport.scroll + visible_height)
    for row in range(viewport.scroll, last):
        values = result.rows[row]
        for col in columns:
            cell = _fit(values[col], viewport.widths[col])
            if focused and row == viewport.cursor and col == viewport.selected_col:
                style = SELECTED
            elif viewport.is_selected(row, col):
                style = "on blue"
            elif row == viewport.cursor:
                style = "bold"
            else:
                style = ""
            text.append(cell, style=style)
        text.append("\n")
    if not result.rows:
        text.append("(no rows)", style=DIM)
    return text


def render_popup(controller: ShellController, tab: Tab) -> Text | None:
    popup = tab.popup
    if popup is None:
        return None
    text = Text()
    if isinstance(popup, TemplateListPopup):
        text.append("Templates", style=ACCENT)
        if popup.searching or popup.filter:
            text.append(f"  /{popup.filter}", style="italic")
        text.append("\n")
        for index, (_, template) in enumerate(controller.visible_templates(tab, popup.filter)):
            style = SELECTED if index == popup.selected else ""
            text.append(f"{template.name}  ", style=style)
            text.append(f"[{template.scope}]\n", style=DIM)
        text.append("enter apply  / search  ^d delete  ^g edit  esc close", style=DIM)
    elif isinstance(popup, SaveTemplatePopup):
        text.append("Save template\n", style=ACCENT)
        text.append("Name:        ")
        text.append(popup.name or " ", style="" if popup.editing_connections else "underline")
        text.append("\nConnections: ")
        text.append(popup.connections or " ", style="underline" if popup.editing_connections else "")
        text.append("\n(empty = global, comma-separated names)", style=DIM)
    elif isinstance(popup, ConfirmDeletePopup):
        text.append(f"Delete template '{popup.name}'? (y/n)", style="bold red")
    elif isinstance(popup, RecordDetailPopup):
        result = tab.result
        text.append(f"Row {popup.row + 1}\n", style=ACCENT)
        if isinstance(result, SelectResult) and popup.row < result.row_count:
            width = max((len(c) for c in result.columns), default=0)
            for index, (column, value) in enumerate(zip(result.columns, result.rows[popup.row])):
                style = SELECTED if index == popup.selected_field else ""
                text.append(f"{column:<{width}}  {value}\n", style=style)
    elif isinstance(popup, CompletionPopup):
        for index, suggestion in enumerate(popup.suggestions):
            style = SELECTED if index == popup.selected else ""
            text.append(f"{suggestion.text:<30}", style=style)
            text.append(f" {suggestion.kind.name.lower()}\n", style=DIM)
    elif isinstance(popup, HelpPopup):
        text.append("\n".join(help_lines()[popup.scroll :]))
    else:
        raise TypeError(f"Unknown popup: {popup!r}")
    return text


def render_status(controller: ShellController, frame: int = 0) -> Text:
    tab = controller.tab
    if controller.mode is Mode.COMMAND:
        return Text(f":{controller.command_buffer}")
    text = Text()
    if tab.loading:
        text.append(SPINNER_FRAMES[frame % len(SPINNER_FRAMES)] + " ", style=ACCENT)
    if tab.status:
        text.append(tab.status)
    else:
        text.append(STATUS_HELP, style=DIM)
    return text
