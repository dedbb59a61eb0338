"""Popup states. At most one popup is open per tab and it owns the keyboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from sqli.domains.query.completion.engine import Suggestion


@dataclass
class TemplateListPopup:
    selected: int = 0
    filter: str = ""
    searching: bool = False


@dataclass
class SaveTemplatePopup:
    name: str = ""
    # Comma-separated connection names; empty means global
    connections: str = ""
    editing_connections: bool = False


@dataclass
class ConfirmDeletePopup:
    index: int
    name: str
    filter: str = ""
    # Selection in the filtered list to restore when returning
    list_selected: int = 0


@dataclass
class RecordDetailPopup:
    row: int
    selected_field: int = 0


@dataclass
class CompletionPopup:
    suggestions: list[Suggestion] = field(default_factory=list)
    selected: int = 0
    word_start: int = 0


@dataclass
class HelpPopup:
    scroll: int = 0


PopupState = Union[
    TemplateListPopup,
    SaveTemplatePopup,
    ConfirmDeletePopup,
    RecordDetailPopup,
    CompletionPopup,
    HelpPopup,
]
