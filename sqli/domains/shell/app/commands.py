"""Command mode (``:``) input and the command table."""

from __future__ import annotations

import logging

from sqli.core.keymap import KeyPress
from sqli.domains.session.domain.popups import HelpPopup
from sqli.domains.session.domain.tab import Mode

from .protocols import ControllerHost

logger = logging.getLogger(__name__)

# Command name -> controller method
COMMANDS: dict[str, str] = {
    "q": "close_tab",
    "quit": "close_tab",
    "qa": "quit",
    "q!": "quit",
    "quitall": "quit",
    "next": "next_tab",
    "tabn": "next_tab",
    "prev": "previous_tab",
    "tabp": "previous_tab",
    "new": "new_tab",
    "tabnew": "new_tab",
    "db": "command_switch_database",
    "system": "command_toggle_system",
    "help": "show_help",
    "h": "show_help",
}


class CommandMixin:
    def enter_command_mode(self: ControllerHost) -> None:
        self.mode = Mode.COMMAND
        self.command_buffer = ""

    def handle_command_key(self: ControllerHost, key: KeyPress) -> None:
        name = key.name
        if name == "escape":
            self.mode = Mode.NORMAL
            self.command_buffer = ""
        elif name == "enter":
            command = self.command_buffer
            self.mode = Mode.NORMAL
            self.command_buffer = ""
            self.run_command(command)
        elif name == "backspace":
            if self.command_buffer:
                self.command_buffer = self.command_buffer[:-1]
            else:
                self.mode = Mode.NORMAL
        elif key.printable is not None:
            self.command_buffer += key.printable

    def run_command(self: ControllerHost, command: str) -> None:
        command = command.strip()
        if not command:
            return
        method = COMMANDS.get(command)
        if method is None:
            self.tab.status = f"Unknown command: {command}"
            return
        logger.debug("Running command %r", command)
        getattr(self, method)()

    # Command handlers

    def close_tab(self: ControllerHost) -> None:
        self.operations.cancel(self.tab)
        if self.session.close_current_tab():
            self.quit()

    def quit(self: ControllerHost) -> None:
        self.should_quit = True

    def next_tab(self: ControllerHost) -> None:
        self.session.next_tab()

    def previous_tab(self: ControllerHost) -> None:
        self.session.previous_tab()

    def new_tab(self: ControllerHost) -> None:
        self.session.new_tab()

    def command_switch_database(self: ControllerHost) -> None:
        self.switch_database(self.tab)

    def command_toggle_system(self: ControllerHost) -> None:
        self.toggle_system_databases(self.tab)

    def show_help(self: ControllerHost) -> None:
        self.tab.popup = HelpPopup()
