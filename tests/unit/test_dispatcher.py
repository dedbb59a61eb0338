"""Tests for the modal key dispatcher (ShellController)."""

from __future__ import annotations

import threading

import pytest

from sqli.domains.connections.app.client_cache import READ_ONLY_MESSAGE
from sqli.domains.query.domain.result import SelectResult
from sqli.domains.session.domain.popups import (
    CompletionPopup,
    ConfirmDeletePopup,
    HelpPopup,
    RecordDetailPopup,
    SaveTemplatePopup,
    TemplateListPopup,
)
from sqli.domains.session.domain.tab import Focus, Mode, ViewState
from sqli.domains.shell.app.controller import ShellController
from sqli.domains.shell.app.mixins.templates import NO_TEMPLATES_MESSAGE
from sqli.domains.templates.store import Template, TemplateStore
from sqli.shared.core.errors import EditorError
from tests.mocks import (
    FakeAdapter,
    FakeClipboard,
    FakeEditor,
    make_config,
    press,
    settle,
    type_text,
)


@pytest.fixture
def adapter(monkeypatch):
    fake = FakeAdapter()
    monkeypatch.setattr("sqli.domains.shell.app.mixins.connection.get_adapter", lambda db_type: fake)
    return fake


@pytest.fixture
def make_controller(adapter, tmp_path):
    created = []

    def factory(connections=None, **kwargs):
        kwargs.setdefault("templates", TemplateStore(tmp_path / "templates.sql"))
        kwargs.setdefault("editor", FakeEditor())
        kwargs.setdefault("clipboard", FakeClipboard())
        if connections is None:
            connections = [make_config("dev")]
        controller = ShellController(connections, **kwargs)
        created.append(controller)
        return controller

    yield factory
    for controller in created:
        controller.close()


@pytest.fixture
def controller(make_controller):
    return make_controller()


def _connect(controller: ShellController) -> None:
    """Connection list -> database list -> database view on ``app``."""
    press(controller, "enter")
    settle(controller)
    assert controller.tab.view is ViewState.DATABASE_LIST
    press(controller, "enter")
    settle(controller)
    assert controller.tab.view is ViewState.DATABASE_VIEW


@pytest.fixture
def connected(controller):
    _connect(controller)
    return controller


def _rows(count: int) -> SelectResult:
    return SelectResult(columns=("id", "name"), rows=tuple((str(i), f"user{i}") for i in range(count)))


class TestConnectionFlow:
    def test_enter_lists_databases_without_system(self, controller, adapter):
        press(controller, "enter")
        assert controller.tab.loading
        assert controller.tab.status == "Connecting..."
        settle(controller)

        tab = controller.tab
        assert tab.view is ViewState.DATABASE_LIST
        assert tab.databases == ["app", "analytics"]
        assert adapter.connect_calls == ["app"]

    def test_selecting_database_connects(self, connected, adapter):
        tab = connected.tab
        assert tab.name == "dev/app"
        assert tab.focus is Focus.QUERY
        assert tab.current_database == "app"
        # The listing client was opened against the same database and is reused
        assert adapter.connect_calls == ["app"]

    def test_configured_database_skips_list(self, make_controller, adapter):
        controller = make_controller([make_config("dev", database="analytics")])
        press(controller, "enter")
        settle(controller)
        assert controller.tab.view is ViewState.DATABASE_VIEW
        assert controller.tab.sidebar.all_tables("analytics") == ["events"]

    def test_connection_failure_stays_on_list(self, controller, adapter):
        adapter.fail_connect = "connection refused"
        press(controller, "enter")
        settle(controller)
        assert controller.tab.view is ViewState.CONNECTION_LIST
        assert controller.tab.status == "Connection failed: connection refused"

    def test_escape_cancels_connecting(self, controller, adapter):
        """Should cancel a pending connect and show an empty connection list."""
        adapter.gate = threading.Event()
        try:
            press(controller, "enter")
            assert controller.tab.pending is not None
            press(controller, "escape")
        finally:
            adapter.gate.set()

        tab = controller.tab
        assert tab.pending is None
        assert tab.view is ViewState.CONNECTION_LIST
        assert tab.databases == []
        assert tab.status == "Cancelled"

    def test_database_list_escape_goes_back(self, controller):
        press(controller, "enter")
        settle(controller)
        press(controller, "escape")
        assert controller.tab.view is ViewState.CONNECTION_LIST

    def test_database_list_navigation(self, controller):
        press(controller, "enter")
        settle(controller)
        press(controller, "j", "j", "j")
        assert controller.tab.selected_database == 1
        press(controller, "k")
        assert controller.tab.selected_database == 0

    def test_new_tab_from_connection_list(self, controller):
        press(controller, "t")
        assert len(controller.session.tabs) == 2
        assert controller.session.current == 1

    def test_group_cycling(self, make_controller):
        controller = make_controller([make_config("a", group="prod"), make_config("b", group="dev")])
        press(controller, "l")
        assert controller.tab.current_group() == "prod"
        press(controller, "h", "h")
        assert controller.tab.current_group() == "dev"

    def test_empty_group_has_no_selection(self, make_controller):
        controller = make_controller([])
        press(controller, "enter")
        assert controller.tab.status == "No connection selected"


class TestPrefixKeys:
    def test_unknown_key_after_ctrl_w_is_swallowed(self, connected):
        """Should drop an unmapped key after Ctrl+W instead of inserting it."""
        press(connected, "ctrl+w", "x")
        tab = connected.tab
        assert tab.query.text == ""
        assert tab.focus is Focus.QUERY
        assert not connected.pending_ctrl_w

        press(connected, "x")
        assert tab.query.text == "x"

    def test_ctrl_w_moves_between_panes(self, connected):
        tab = connected.tab
        press(connected, "ctrl+w", "j")
        assert tab.focus is Focus.OUTPUT
        press(connected, "ctrl+w", "k")
        assert tab.focus is Focus.QUERY
        press(connected, "ctrl+w", "h")
        assert tab.focus is Focus.SIDEBAR
        press(connected, "ctrl+w", "l")
        assert tab.focus is Focus.QUERY
        press(connected, "ctrl+w", "h", "ctrl+w", "w")
        assert tab.focus is Focus.QUERY

    def test_ctrl_w_move_without_neighbour_is_ignored(self, connected):
        press(connected, "ctrl+w", "k")
        assert connected.tab.focus is Focus.QUERY
        press(connected, "ctrl+w", "h", "ctrl+w", "j")
        assert connected.tab.focus is Focus.SIDEBAR

    def test_unknown_key_after_g_is_swallowed(self, connected):
        """Should drop the key following a lone g in the result grid."""
        tab = connected.tab
        tab.set_result(_rows(30))
        tab.focus = Focus.OUTPUT
        press(connected, "j", "j", "j")
        assert tab.viewport.cursor == 3

        press(connected, "g", "j")
        assert tab.viewport.cursor == 3
        assert not tab.pending_g

        press(connected, "g", "g")
        assert tab.viewport.cursor == 0

    def test_escape_colon_enters_command_mode(self, connected):
        press(connected, "escape", ":")
        assert connected.mode is Mode.COMMAND

    def test_escape_then_other_key_is_handled_normally(self, connected):
        """Should discard the escape prefix and insert the next key."""
        press(connected, "escape", "x")
        assert connected.mode is Mode.NORMAL
        assert connected.tab.query.text == "x"
        assert not connected.pending_escape

    def test_colon_in_query_is_text(self, connected):
        type_text(connected, "a::b")
        assert connected.tab.query.text == "a::b"
        assert connected.mode is Mode.NORMAL


class TestCommandMode:
    def test_quit_on_last_tab(self, controller):
        type_text(controller, ":q")
        assert controller.mode is Mode.COMMAND
        assert controller.command_buffer == "q"
        press(controller, "enter")
        assert controller.should_quit
        assert controller.mode is Mode.NORMAL

    def test_quit_closes_one_of_many_tabs(self, controller):
        type_text(controller, ":tabnew")
        press(controller, "enter")
        assert len(controller.session.tabs) == 2
        type_text(controller, ":q")
        press(controller, "enter")
        assert len(controller.session.tabs) == 1
        assert not controller.should_quit

    def test_quit_all(self, controller):
        controller.session.new_tab()
        type_text(controller, ":qa")
        press(controller, "enter")
        assert controller.should_quit

    def test_tab_switching(self, controller):
        controller.session.new_tab()
        type_text(controller, ":next")
        press(controller, "enter")
        assert controller.session.current == 0
        type_text(controller, ":prev")
        press(controller, "enter")
        assert controller.session.current == 1

    def test_unknown_command(self, controller):
        type_text(controller, ":frobnicate")
        press(controller, "enter")
        assert controller.tab.status == "Unknown command: frobnicate"

    def test_escape_discards_buffer(self, controller):
        type_text(controller, ":qa")
        press(controller, "escape")
        assert controller.mode is Mode.NORMAL
        assert controller.command_buffer == ""
        assert not controller.should_quit

    def test_backspace_on_empty_buffer_leaves_command_mode(self, controller):
        type_text(controller, ":x")
        press(controller, "backspace")
        assert controller.mode is Mode.COMMAND
        press(controller, "backspace")
        assert controller.mode is Mode.NORMAL

    def test_help(self, controller):
        type_text(controller, ":help")
        press(controller, "enter")
        assert isinstance(controller.tab.popup, HelpPopup)
        press(controller, "j")
        assert controller.tab.popup.scroll == 1
        press(controller, "q")
        assert controller.tab.popup is None

    def test_system_outside_database_list(self, connected):
        press(connected, "escape")
        type_text(connected, ":system")
        press(connected, "enter")
        assert connected.tab.status == "Use :system from the database list"

    def test_system_relists_with_system_databases(self, controller):
        press(controller, "enter")
        settle(controller)
        type_text(controller, ":system")
        press(controller, "enter")
        settle(controller)
        assert controller.tab.show_system_databases
        assert "sys" in controller.tab.databases

    def test_db_returns_to_database_list(self, connected):
        press(connected, "escape")
        type_text(connected, ":db")
        press(connected, "enter")
        settle(connected)
        tab = connected.tab
        assert tab.view is ViewState.DATABASE_LIST
        assert tab.selected_database == 0

        press(connected, "escape")
        assert tab.view is ViewState.DATABASE_VIEW

    def test_db_when_not_connected(self, controller):
        type_text(controller, ":db")
        press(controller, "enter")
        assert controller.tab.status == "Not connected"


class TestQueryExecution:
    def test_execute_shows_result(self, connected):
        type_text(connected, "select 1")
        press(connected, "f5")
        settle(connected)
        tab = connected.tab
        assert isinstance(tab.result, SelectResult)
        assert "2 row(s) returned" in tab.status
        assert tab.focus is Focus.QUERY

    def test_empty_query(self, connected):
        press(connected, "ctrl+r")
        assert connected.tab.status == "Query is empty"
        assert connected.tab.pending is None

    def test_read_only_rejects_write(self, make_controller):
        """Should refuse writes on a read-only connection before running anything."""
        controller = make_controller([make_config("dev", readonly=True)])
        _connect(controller)
        type_text(controller, "delete from users")
        press(controller, "f5")
        assert controller.tab.status == READ_ONLY_MESSAGE
        assert controller.tab.pending is None

    def test_read_only_allows_select(self, make_controller):
        controller = make_controller([make_config("dev", readonly=True)])
        _connect(controller)
        type_text(controller, "select 1")
        press(controller, "f5")
        settle(controller)
        assert isinstance(controller.tab.result, SelectResult)

    def test_failed_statement_keeps_result(self, connected):
        type_text(connected, "select 1")
        press(connected, "f5")
        settle(connected)
        previous = connected.tab.result

        connected.tab.query.set_text("insert 1; fail now")
        press(connected, "f5")
        settle(connected)
        assert connected.tab.result is previous
        assert connected.tab.status == "Error: Statement 2: syntax error"

    def test_editor_replaces_query(self, make_controller):
        editor = FakeEditor(response="select 42\n")
        controller = make_controller(editor=editor)
        _connect(controller)
        type_text(controller, "select 1")
        press(controller, "ctrl+g")
        assert controller.tab.query.text == "select 42"
        assert editor.calls == [("select 1", "sql")]

    def test_editor_error(self, make_controller):
        controller = make_controller(editor=FakeEditor(error=EditorError("Editor exited with error")))
        _connect(controller)
        type_text(controller, "select 1")
        press(controller, "ctrl+g")
        assert controller.tab.status == "Editor error: Editor exited with error"
        assert controller.tab.query.text == "select 1"

    def test_tab_cycles_focus(self, connected):
        tab = connected.tab
        press(connected, "tab")
        assert tab.focus is Focus.OUTPUT
        press(connected, "tab")
        assert tab.focus is Focus.SIDEBAR
        press(connected, "tab")
        assert tab.focus is Focus.QUERY
        press(connected, "shift+tab")
        assert tab.focus is Focus.SIDEBAR


class TestSidebar:
    def test_preview_table(self, connected):
        tab = connected.tab
        press(connected, "shift+tab", "j")
        press(connected, "enter")
        assert tab.query.text == 'SELECT * FROM "orders" LIMIT 50'
        settle(connected)
        assert isinstance(tab.result, SelectResult)
        assert tab.focus is Focus.OUTPUT

    def test_describe_table_keeps_focus(self, connected):
        tab = connected.tab
        press(connected, "shift+tab", "j", "j", "d")
        assert tab.query.text == "DESCRIBE users"
        settle(connected)
        assert tab.focus is Focus.SIDEBAR

    def test_expanding_database_loads_tables_once(self, connected, adapter):
        tab = connected.tab
        press(connected, "shift+tab", "j", "j", "j")
        press(connected, "enter")
        assert tab.status == "Loading tables for analytics..."
        settle(connected)
        assert tab.sidebar.all_tables("analytics") == ["events"]
        assert tab.current_database == "analytics"
        assert tab.name == "dev/analytics"

        press(connected, "enter", "enter")
        assert tab.pending is None

    def test_refresh(self, connected, adapter):
        adapter.databases = ["app", "reporting"]
        press(connected, "shift+tab", "r")
        settle(connected)
        tab = connected.tab
        assert tab.sidebar.databases == ["app", "reporting"]
        assert tab.view is ViewState.DATABASE_VIEW


class TestResults:
    @pytest.fixture
    def grid(self, connected):
        tab = connected.tab
        tab.set_result(_rows(30))
        tab.focus = Focus.OUTPUT
        return connected

    def test_movement(self, grid):
        tab = grid.tab
        press(grid, "G")
        assert tab.viewport.cursor == 29
        press(grid, "pageup")
        assert tab.viewport.cursor == 19
        press(grid, "l")
        assert tab.viewport.selected_col == 1
        press(grid, "0")
        assert tab.viewport.selected_col == 0
        press(grid, "$")
        assert tab.viewport.selected_col == 1

    def test_yank_current_cell(self, make_controller):
        clipboard = FakeClipboard()
        controller = make_controller(clipboard=clipboard)
        _connect(controller)
        tab = controller.tab
        tab.set_result(_rows(5))
        tab.focus = Focus.OUTPUT
        press(controller, "j", "l", "y")
        assert clipboard.copied == ["user1"]
        assert tab.status == "Copied 1 row(s)"

    def test_yank_line_selection(self, make_controller):
        clipboard = FakeClipboard()
        controller = make_controller(clipboard=clipboard)
        _connect(controller)
        tab = controller.tab
        tab.set_result(_rows(5))
        tab.focus = Focus.OUTPUT
        press(controller, "V", "j", "y")
        assert clipboard.copied == ["0\tuser0\n1\tuser1"]
        assert tab.status == "Copied 2 row(s)"
        assert tab.viewport.visual is None

    def test_yank_without_clipboard(self, make_controller):
        controller = make_controller(clipboard=FakeClipboard(available=False))
        _connect(controller)
        controller.tab.set_result(_rows(2))
        controller.tab.focus = Focus.OUTPUT
        press(controller, "y")
        assert controller.tab.status == "Clipboard unavailable (install pyperclip)"

    def test_yank_nothing(self, connected):
        connected.tab.focus = Focus.OUTPUT
        press(connected, "y")
        assert connected.tab.status == "Nothing to copy"

    def test_escape_clears_selection(self, grid):
        press(grid, "v")
        assert grid.tab.viewport.visual is not None
        press(grid, "escape")
        assert grid.tab.viewport.visual is None

    def test_record_detail(self, grid):
        tab = grid.tab
        press(grid, "j", "enter")
        popup = tab.popup
        assert isinstance(popup, RecordDetailPopup)
        assert popup.row == 1
        press(grid, "G")
        assert popup.selected_field == 1
        press(grid, "j")
        assert popup.selected_field == 1
        press(grid, "g")
        assert popup.selected_field == 0
        press(grid, "escape")
        assert tab.popup is None


class TestTemplates:
    def test_no_templates(self, connected):
        press(connected, "ctrl+o")
        assert connected.tab.status == NO_TEMPLATES_MESSAGE
        assert connected.tab.popup is None

    def test_cannot_save_empty_query(self, connected):
        press(connected, "ctrl+s")
        assert connected.tab.status == "Cannot save empty query as template"

    def test_save_requires_name(self, connected):
        type_text(connected, "select 1")
        press(connected, "ctrl+s")
        assert isinstance(connected.tab.popup, SaveTemplatePopup)
        press(connected, "enter")
        assert connected.tab.status == "Template name cannot be empty"
        assert isinstance(connected.tab.popup, SaveTemplatePopup)

    def test_save_and_load(self, connected):
        type_text(connected, "select count(*) from users")
        press(connected, "ctrl+s")
        type_text(connected, "Count")
        press(connected, "tab")
        type_text(connected, "dev")
        press(connected, "enter")

        assert connected.tab.status == "Saved template 'Count'"
        saved = connected.templates.templates[0]
        assert (saved.name, saved.query, saved.scope.connections) == ("Count", "select count(*) from users", ("dev",))

        connected.tab.query.set_text("")
        press(connected, "ctrl+o")
        assert isinstance(connected.tab.popup, TemplateListPopup)
        press(connected, "enter")
        assert connected.tab.query.text == "select count(*) from users"
        assert connected.tab.status == "Loaded template 'Count'"

    def test_apply_places_cursor_after_placeholder(self, connected):
        connected.templates.save([Template("Peek", "select * from <table> limit 10")])
        press(connected, "ctrl+o", "enter")
        assert connected.tab.query.cursor == (0, 21)

    def test_templates_scoped_to_other_connections_are_hidden(self, connected):
        from sqli.domains.templates.store import TemplateScope

        connected.templates.save([Template("Prod", "select 1", TemplateScope(("prod",)))])
        press(connected, "ctrl+o")
        assert connected.tab.status == NO_TEMPLATES_MESSAGE

    def test_search_filters_list(self, connected):
        connected.templates.save([Template("Alpha", "select 1"), Template("Beta", "select 2")])
        press(connected, "ctrl+o", "/")
        type_text(connected, "be")
        popup = connected.tab.popup
        assert popup.searching
        assert popup.filter == "be"
        press(connected, "enter")
        assert connected.tab.query.text == "select 2"

    def test_delete_with_confirmation(self, connected):
        connected.templates.save([Template("Alpha", "select 1"), Template("Beta", "select 2")])
        press(connected, "ctrl+o", "j", "ctrl+d")
        assert isinstance(connected.tab.popup, ConfirmDeletePopup)
        press(connected, "y")
        assert connected.tab.status == "Deleted template 'Beta'"
        assert [t.name for t in connected.templates.templates] == ["Alpha"]
        assert isinstance(connected.tab.popup, TemplateListPopup)
        assert connected.tab.popup.selected == 0

    def test_decline_delete(self, connected):
        connected.templates.save([Template("Alpha", "select 1")])
        press(connected, "ctrl+o", "ctrl+d", "n")
        assert isinstance(connected.tab.popup, TemplateListPopup)
        assert len(connected.templates.templates) == 1

    def test_deleting_last_template_closes_list(self, connected):
        connected.templates.save([Template("Alpha", "select 1")])
        press(connected, "ctrl+o", "ctrl+d", "enter")
        assert connected.tab.popup is None

    def test_edit_template_in_editor(self, make_controller):
        editor = FakeEditor(response="--- Renamed [global]\nselect 99\n")
        controller = make_controller(editor=editor)
        _connect(controller)
        controller.templates.save([Template("Alpha", "select 1")])
        press(controller, "ctrl+o", "ctrl+g")
        assert editor.calls[0][0] == "--- Alpha [global]\nselect 1\n"
        assert controller.templates.templates == [Template("Renamed", "select 99")]
        assert controller.tab.status == "Saved template 'Renamed'"


class TestCompletion:
    def test_table_completion(self, connected):
        type_text(connected, "select * from us")
        press(connected, "ctrl+space")
        popup = connected.tab.popup
        assert isinstance(popup, CompletionPopup)
        assert [s.text for s in popup.suggestions] == ["users"]
        press(connected, "enter")
        assert connected.tab.query.text == "select * from users"
        assert connected.tab.popup is None

    def test_alias_column_completion(self, connected):
        type_text(connected, "select * from users u where u.")
        press(connected, "ctrl+space")
        popup = connected.tab.popup
        assert [s.text for s in popup.suggestions] == ["email", "id", "name"]
        press(connected, "j", "tab")
        assert connected.tab.query.text == "select * from users u where u.id"
        assert connected.tab.column_cache["users"] == ["id", "name", "email"]

    def test_no_completions(self, connected):
        type_text(connected, "select * from zz")
        press(connected, "ctrl+space")
        assert connected.tab.popup is None
        assert connected.tab.status == "No completions available"

    def test_other_key_closes_popup_and_types(self, connected):
        type_text(connected, "SEL")
        press(connected, "ctrl+space")
        assert isinstance(connected.tab.popup, CompletionPopup)
        press(connected, "x")
        assert connected.tab.popup is None
        assert connected.tab.query.text == "SELx"


class TestCancelFromDatabaseView:
    def test_escape_cancels_pending_operation(self, connected, adapter):
        adapter.gate = threading.Event()
        tab = connected.tab
        try:
            press(connected, "shift+tab", "j", "j", "j", "enter")
            assert tab.pending is not None
            press(connected, "escape")
        finally:
            adapter.gate.set()
        assert tab.pending is None
        assert tab.status == "Cancelled"
        assert tab.view is ViewState.DATABASE_VIEW
        assert not connected.pending_escape
