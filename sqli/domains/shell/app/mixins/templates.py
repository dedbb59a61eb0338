"""Template list, save and delete popups."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqli.core.keymap import KeyPress
from sqli.domains.session.domain.popups import ConfirmDeletePopup, SaveTemplatePopup, TemplateListPopup
from sqli.domains.session.domain.tab import Focus
from sqli.domains.templates.store import Template, TemplateScope, find_placeholder, parse_templates, serialize_template
from sqli.shared.core.errors import EditorError, StorageError

from ..protocols import ControllerHost

if TYPE_CHECKING:
    from sqli.domains.session.domain.tab import Tab

logger = logging.getLogger(__name__)

NO_TEMPLATES_MESSAGE = "No templates saved. Use Ctrl+S to save a template."


class TemplateMixin:
    def visible_templates(self: ControllerHost, tab: Tab, filter_text: str = "") -> list[tuple[int, Template]]:
        """Templates offered to the tab's connection, filtered by name."""
        connection = tab.active_connection.name if tab.active_connection else ""
        needle = filter_text.lower()
        return [(i, t) for i, t in self.templates.for_connection(connection) if needle in t.name.lower()]

    def open_template_list(self: ControllerHost, tab: Tab) -> None:
        if not self.visible_templates(tab):
            tab.status = NO_TEMPLATES_MESSAGE
            return
        tab.popup = TemplateListPopup()

    def open_save_template(self: ControllerHost, tab: Tab) -> None:
        if tab.query.is_empty():
            tab.status = "Cannot save empty query as template"
            return
        tab.popup = SaveTemplatePopup()

    def apply_template(self: ControllerHost, tab: Tab, template: Template) -> None:
        """Load a template into the editor with the cursor after its first placeholder."""
        tab.query.set_text(template.query)
        placeholder = find_placeholder(template.query)
        if placeholder is not None:
            line, col, length = placeholder
            tab.query.move_to(line, col + length)
        tab.popup = None
        tab.focus = Focus.QUERY
        tab.status = f"Loaded template '{template.name}'"

    # Template list

    def handle_template_list_key(self: ControllerHost, tab: Tab, popup: TemplateListPopup, key: KeyPress) -> None:
        name = key.name
        visible = self.visible_templates(tab, popup.filter)

        if name == "escape":
            if popup.searching:
                popup.searching = False
            else:
                tab.popup = None
            return
        if name == "enter":
            if visible:
                self.apply_template(tab, visible[popup.selected][1])
            return
        if name == "ctrl+u":
            popup.filter = ""
            popup.selected = 0
            return
        if name == "down" or (name == "j" and not popup.searching):
            popup.selected = min(popup.selected + 1, max(0, len(visible) - 1))
            return
        if name == "up" or (name == "k" and not popup.searching):
            popup.selected = max(popup.selected - 1, 0)
            return

        if popup.searching:
            if name == "backspace":
                popup.filter = popup.filter[:-1]
                popup.selected = 0
            elif key.printable is not None:
                popup.filter += key.printable
                popup.selected = 0
            return

        if name == "/":
            popup.searching = True
        elif name == "ctrl+d" and visible:
            index, template = visible[popup.selected]
            tab.popup = ConfirmDeletePopup(index=index, name=template.name, filter=popup.filter, list_selected=popup.selected)
        elif name == "ctrl+g" and visible:
            self.edit_template(tab, visible[popup.selected][0])

    def edit_template(self: ControllerHost, tab: Tab, index: int) -> None:
        """Edit one template in the external editor and store what comes back."""
        original = self.templates.templates[index]
        try:
            edited = self.editor(serialize_template(original), "sql")
        except EditorError as e:
            logger.warning("Editor failed: %s", e)
            tab.status = f"Editor error: {e}"
            return
        parsed = parse_templates(edited)
        if not parsed:
            tab.status = "No template found in edited text"
            return
        templates = list(self.templates.templates)
        templates[index : index + 1] = parsed
        try:
            self.templates.save(templates)
        except StorageError as e:
            logger.warning("Failed to save templates: %s", e)
            tab.status = f"Failed to save template: {e}"
            return
        tab.status = f"Saved template '{parsed[0].name}'"

    # Save

    def handle_save_template_key(self: ControllerHost, tab: Tab, popup: SaveTemplatePopup, key: KeyPress) -> None:
        name = key.name
        if name == "escape":
            tab.popup = None
        elif name in ("tab", "up", "down"):
            popup.editing_connections = not popup.editing_connections
        elif name == "enter":
            self.save_template(tab, popup)
        elif name == "backspace":
            if popup.editing_connections:
                popup.connections = popup.connections[:-1]
            else:
                popup.name = popup.name[:-1]
        elif key.printable is not None:
            if popup.editing_connections:
                popup.connections += key.printable
            else:
                popup.name += key.printable

    def save_template(self: ControllerHost, tab: Tab, popup: SaveTemplatePopup) -> None:
        name = popup.name.strip()
        if not name:
            tab.status = "Template name cannot be empty"
            return
        query = tab.query.text.strip()
        tab.popup = None
        if not query:
            tab.status = "Cannot save empty query as template"
            return
        template = Template(name=name, query=query, scope=TemplateScope.parse(popup.connections))
        try:
            self.templates.add(template)
        except StorageError as e:
            logger.warning("Failed to save template %r: %s", name, e)
            tab.status = f"Failed to save template: {e}"
            return
        tab.status = f"Saved template '{name}'"

    # Delete

    def handle_confirm_delete_key(self: ControllerHost, tab: Tab, popup: ConfirmDeletePopup, key: KeyPress) -> None:
        name = key.name
        if name in ("y", "enter"):
            try:
                self.templates.delete(popup.index)
            except StorageError as e:
                logger.warning("Failed to delete template %r: %s", popup.name, e)
                tab.status = f"Failed to delete template: {e}"
                tab.popup = None
                return
            tab.status = f"Deleted template '{popup.name}'"
            self.return_to_template_list(tab, popup)
        elif name in ("n", "escape"):
            self.return_to_template_list(tab, popup)

    def return_to_template_list(self: ControllerHost, tab: Tab, popup: ConfirmDeletePopup) -> None:
        visible = self.visible_templates(tab, popup.filter)
        if not visible:
            if not self.visible_templates(tab):
                tab.popup = None
                return
            popup.filter = ""
            visible = self.visible_templates(tab)
        selected = max(0, min(popup.list_selected, len(visible) - 1))
        tab.popup = TemplateListPopup(selected=selected, filter=popup.filter)
