"""Protocol describing what the controller mixins expect from their host.

Mixins annotate ``self`` with ``ControllerHost`` so each one can call into
the others without importing them.

Note: mixins must not inherit from Protocol at runtime.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol

if TYPE_CHECKING:
    from sqli.core.keymap import KeyPress
    from sqli.domains.connections.domain.config import ConnectionConfig
    from sqli.domains.connections.providers.adapters.base import DatabaseAdapter
    from sqli.domains.operations.app.lifecycle import OperationManager
    from sqli.domains.session.app.registry import Session
    from sqli.domains.session.domain.popups import (
        CompletionPopup,
        ConfirmDeletePopup,
        HelpPopup,
        RecordDetailPopup,
        SaveTemplatePopup,
        TemplateListPopup,
    )
    from sqli.domains.session.domain.tab import Mode, Tab
    from sqli.domains.templates.store import Template, TemplateStore


class ControllerHost(Protocol):
    """What the controller mixins expect from ShellController."""

    session: Session
    operations: OperationManager
    templates: TemplateStore
    mode: Mode
    command_buffer: str
    pending_ctrl_w: bool
    pending_escape: bool
    should_quit: bool
    visible_height: int
    visible_width: int
    editor: Callable[[str, str], str]
    clipboard: Callable[[str], bool]

    @property
    def tab(self) -> Tab: ...

    # Commands
    def enter_command_mode(self) -> None: ...

    def handle_command_key(self, key: KeyPress) -> None: ...

    def run_command(self, command: str) -> None: ...

    def quit(self) -> None: ...

    # Connection flow
    def adapter_for(self, config: ConnectionConfig) -> DatabaseAdapter | None: ...

    def initiate_connection(self, tab: Tab) -> None: ...

    def list_databases(self, tab: Tab, config: ConnectionConfig, *, refresh: bool = False) -> None: ...

    def connect_to_database(self, tab: Tab, config: ConnectionConfig, database: str) -> None: ...

    def load_tables(self, tab: Tab, database: str, *, refresh: bool = False) -> None: ...

    def switch_database(self, tab: Tab) -> None: ...

    def toggle_system_databases(self, tab: Tab) -> None: ...

    # Sidebar
    def activate_sidebar_item(self, tab: Tab) -> None: ...

    def describe_selected_table(self, tab: Tab) -> None: ...

    # Query
    def execute_query(self, tab: Tab, *, focus_output: bool = False) -> None: ...

    def handle_buffer_key(self, tab: Tab, key: KeyPress) -> None: ...

    def edit_query_in_editor(self, tab: Tab) -> None: ...

    # Completion
    def open_completion(self, tab: Tab) -> None: ...

    def columns_for(self, tab: Tab, table: str) -> list[str]: ...

    def handle_completion_key(self, tab: Tab, popup: CompletionPopup, key: KeyPress) -> None: ...

    # Templates
    def visible_templates(self, tab: Tab, filter_text: str = "") -> list[tuple[int, Template]]: ...

    def open_template_list(self, tab: Tab) -> None: ...

    def open_save_template(self, tab: Tab) -> None: ...

    def apply_template(self, tab: Tab, template: Template) -> None: ...

    def edit_template(self, tab: Tab, index: int) -> None: ...

    def save_template(self, tab: Tab, popup: SaveTemplatePopup) -> None: ...

    def return_to_template_list(self, tab: Tab, popup: ConfirmDeletePopup) -> None: ...

    def handle_template_list_key(self, tab: Tab, popup: TemplateListPopup, key: KeyPress) -> None: ...

    def handle_save_template_key(self, tab: Tab, popup: SaveTemplatePopup, key: KeyPress) -> None: ...

    def handle_confirm_delete_key(self, tab: Tab, popup: ConfirmDeletePopup, key: KeyPress) -> None: ...

    # Results
    def yank_selection(self, tab: Tab) -> None: ...

    def handle_record_detail_key(self, tab: Tab, popup: RecordDetailPopup, key: KeyPress) -> None: ...

    # Navigation
    def handle_help_key(self, tab: Tab, popup: HelpPopup, key: KeyPress) -> None: ...
