"""Core key definitions (UI-agnostic)."""

from __future__ import annotations

from dataclasses import dataclass

KEY_DISPLAY_OVERRIDES: dict[str, str] = {
    "escape": "esc",
    "enter": "<enter>",
    "backspace": "<backspace>",
    "shift+tab": "S-tab",
    "ctrl+@": "^space",
    "ctrl+space": "^space",
    "pagedown": "PgDn",
    "pageup": "PgUp",
}

CTRL_SPACE_KEYS = frozenset({"ctrl+@", "ctrl+space", "ctrl+at"})


def format_key(key: str) -> str:
    """Format a key name for display in UI hints."""
    if key in KEY_DISPLAY_OVERRIDES:
        return KEY_DISPLAY_OVERRIDES[key]
    if key.startswith("ctrl+"):
        return f"^{key.split('+', 1)[1]}"
    return key


@dataclass(frozen=True)
class KeyPress:
    """A single key event as the controller sees it.

    ``key`` is a Textual key name ("j", "down", "ctrl+w", "shift+tab").
    ``character`` is the printable character, if any. Textual names
    punctuation keys ("colon", "dollar_sign"), so printable characters take
    precedence when the controller matches keys.
    """

    key: str
    character: str | None = None

    @property
    def name(self) -> str:
        char = self.character
        if char is not None and len(char) == 1 and char.isprintable():
            return char
        return self.key

    @property
    def printable(self) -> str | None:
        """The character to insert into a text buffer, if any."""
        name = self.name
        if len(name) == 1 and name.isprintable():
            return name
        return None

    @property
    def is_ctrl_space(self) -> bool:
        return self.key in CTRL_SPACE_KEYS


@dataclass(frozen=True)
class HelpEntry:
    key: str
    description: str
    category: str


HELP_ENTRIES: list[HelpEntry] = [
    HelpEntry(":", "Enter command mode", "General"),
    HelpEntry("t", "New tab (connection list)", "General"),
    HelpEntry("escape", "Cancel running operation", "General"),
    HelpEntry("ctrl+w h/j/k/l", "Move between panes", "Panes"),
    HelpEntry("tab", "Next pane", "Panes"),
    HelpEntry("shift+tab", "Previous pane", "Panes"),
    HelpEntry("enter", "Expand database / preview table", "Sidebar"),
    HelpEntry("d", "Describe table", "Sidebar"),
    HelpEntry("r", "Refresh databases", "Sidebar"),
    HelpEntry("f5", "Execute query", "Query"),
    HelpEntry("ctrl+r", "Execute query", "Query"),
    HelpEntry("ctrl+o", "Open templates", "Query"),
    HelpEntry("ctrl+s", "Save as template", "Query"),
    HelpEntry("ctrl+g", "Edit in external editor", "Query"),
    HelpEntry("ctrl+space", "Complete word", "Query"),
    HelpEntry("ctrl+k", "Delete to end of line", "Query"),
    HelpEntry("escape :", "Command mode from the editor", "Query"),
    HelpEntry("j/k", "Move row", "Results"),
    HelpEntry("h/l", "Move column", "Results"),
    HelpEntry("gg/G", "First / last row", "Results"),
    HelpEntry("0/$", "First / last column", "Results"),
    HelpEntry("v/V", "Visual cell / line selection", "Results"),
    HelpEntry("y", "Copy selection", "Results"),
    HelpEntry("enter", "Record detail", "Results"),
    HelpEntry(":q", "Close tab", "Commands"),
    HelpEntry(":qa", "Quit", "Commands"),
    HelpEntry(":next :prev :new", "Switch / open tabs", "Commands"),
    HelpEntry(":db", "Switch database", "Commands"),
    HelpEntry(":system", "Toggle system databases", "Commands"),
]

STATUS_HELP = ":q quit | :db switch database | F5/Ctrl+R exec | Ctrl+O templates | Ctrl+S save | Ctrl+G editor"


def help_lines() -> list[str]:
    """Render the help entries grouped by category."""
    lines: list[str] = []
    category = None
    for entry in HELP_ENTRIES:
        if entry.category != category:
            if lines:
                lines.append("")
            lines.append(entry.category)
            category = entry.category
        lines.append(f"  {format_key(entry.key):<18} {entry.description}")
    return lines
