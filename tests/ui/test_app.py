"""Pilot tests for the Textual app shell."""

from __future__ import annotations

import pytest

from sqli.app import SqliApp
from sqli.domains.connections.domain.config import ConnectionConfig
from sqli.domains.query.domain.result import SelectResult
from sqli.domains.session.domain.tab import Focus, Mode, ViewState
from sqli.domains.shell.app.controller import ShellController
from sqli.domains.templates.store import TemplateStore


async def _wait_until(pilot, condition, attempts: int = 100) -> None:
    """Let the app tick until ``condition`` holds."""
    for _ in range(attempts):
        if condition():
            return
        await pilot.pause(0.05)
    assert condition()


@pytest.fixture
def sqlite_config(sqlite_db_path):
    return ConnectionConfig(name="shop", db_type="sqlite", path=str(sqlite_db_path))


@pytest.fixture
def controller(sqlite_config, tmp_path):
    return ShellController([sqlite_config], templates=TemplateStore(tmp_path / "templates.sql"))


class TestSqliApp:
    @pytest.mark.asyncio
    async def test_starts_on_connection_list(self, controller):
        app = SqliApp([], controller=controller)
        async with app.run_test(size=(100, 35)) as pilot:
            await pilot.pause()
            assert controller.tab.view is ViewState.CONNECTION_LIST
            assert not app.screen.has_class("database-view")
            assert app.query_one("#list-view").border_title == "Connections"

    @pytest.mark.asyncio
    async def test_command_quit_exits(self, controller):
        app = SqliApp([], controller=controller)
        async with app.run_test(size=(100, 35)) as pilot:
            await pilot.press("colon")
            assert controller.mode is Mode.COMMAND
            await pilot.press("q", "enter")
            await pilot.pause()
            assert controller.should_quit

    @pytest.mark.asyncio
    async def test_connect_and_query(self, controller):
        """Should connect to the SQLite file and show query results."""
        app = SqliApp([], controller=controller)
        async with app.run_test(size=(120, 40)) as pilot:
            await pilot.press("enter")
            await _wait_until(pilot, lambda: controller.tab.view is ViewState.DATABASE_VIEW)
            await pilot.pause()
            assert app.screen.has_class("database-view")
            assert app.query_one("#query-area").has_class("active-pane")

            await pilot.press(*"select", "space", *"1")
            assert controller.tab.query.text == "select 1"
            await pilot.press("f5")
            await _wait_until(pilot, lambda: isinstance(controller.tab.result, SelectResult))
            assert controller.tab.result.rows == (("1",),)
            assert controller.visible_height > 0

    @pytest.mark.asyncio
    async def test_ctrl_w_moves_focus(self, controller):
        app = SqliApp([], controller=controller)
        async with app.run_test(size=(120, 40)) as pilot:
            await pilot.press("enter")
            await _wait_until(pilot, lambda: controller.tab.view is ViewState.DATABASE_VIEW)
            await pilot.press("ctrl+w", "h")
            await pilot.pause()
            assert controller.tab.focus is Focus.SIDEBAR
            assert app.query_one("#sidebar").has_class("active-pane")

    @pytest.mark.asyncio
    async def test_editor_unavailable_in_headless_mode(self, sqlite_config):
        app = SqliApp([sqlite_config])
        async with app.run_test(size=(120, 40)) as pilot:
            controller = app.controller
            await pilot.press("enter")
            await _wait_until(pilot, lambda: controller.tab.view is ViewState.DATABASE_VIEW)
            await pilot.press("ctrl+g")
            await pilot.pause()
            assert controller.tab.status.startswith("Editor error:")

    @pytest.mark.asyncio
    async def test_help_popup_is_shown(self, controller):
        app = SqliApp([], controller=controller)
        async with app.run_test(size=(100, 35)) as pilot:
            await pilot.press("colon", *"help", "enter")
            await pilot.pause()
            assert app.query_one("#popup").has_class("visible")
            await pilot.press("escape")
            await pilot.pause()
            assert not app.query_one("#popup").has_class("visible")
