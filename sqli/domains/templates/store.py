"""Saved query templates.

Templates live in a plain SQL file so they can be edited by hand::

    --- Count Rows [global]
    SELECT COUNT(*) FROM <table>

    --- Active Users [prod,staging]
    SELECT * FROM users WHERE active = true LIMIT <limit>

The bracketed scope is ``global`` or a comma-separated list of connection
names the template is offered for. ``<...>`` marks a placeholder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from sqli.shared.core.store import CONFIG_DIR, FileStore

logger = logging.getLogger(__name__)

HEADER_PREFIX = "--- "


@dataclass(frozen=True)
class TemplateScope:
    """``connections`` is empty for global templates."""

    connections: tuple[str, ...] = ()

    @property
    def is_global(self) -> bool:
        return not self.connections

    @classmethod
    def parse(cls, text: str) -> TemplateScope:
        text = text.strip()
        if not text or text.lower() == "global":
            return cls()
        names = tuple(name.strip() for name in text.split(",") if name.strip())
        return cls(names)

    def matches(self, connection_name: str) -> bool:
        return self.is_global or connection_name in self.connections

    def __str__(self) -> str:
        return "global" if self.is_global else ",".join(self.connections)


GLOBAL = TemplateScope()


@dataclass(frozen=True)
class Template:
    name: str
    query: str
    scope: TemplateScope = GLOBAL


def _parse_header(header: str) -> tuple[str, TemplateScope] | None:
    """Parse ``Template Name [scope]``; the last bracket pair is the scope."""
    header = header.strip()
    start = header.rfind("[")
    end = header.rfind("]")
    if start == -1 or end <= start:
        return None
    return header[:start].strip(), TemplateScope.parse(header[start + 1 : end])


def parse_templates(content: str) -> list[Template]:
    """Parse the template file format. Templates with an empty query are skipped."""
    templates: list[Template] = []
    current: tuple[str, TemplateScope] | None = None
    body: list[str] = []

    def flush() -> None:
        if current is None:
            return
        query = "\n".join(body).strip()
        if query:
            templates.append(Template(name=current[0], query=query, scope=current[1]))

    for line in content.splitlines():
        if line.startswith(HEADER_PREFIX):
            flush()
            current = _parse_header(line[len(HEADER_PREFIX) :])
            body = []
        elif current is not None:
            body.append(line)
    flush()
    return templates


def serialize_template(template: Template) -> str:
    return f"{HEADER_PREFIX}{template.name} [{template.scope}]\n{template.query}\n"


def serialize_templates(templates: list[Template]) -> str:
    return "\n".join(serialize_template(t) for t in templates)


def find_placeholder(query: str) -> tuple[int, int, int] | None:
    """Locate the first ``<...>`` placeholder as (line, column, length)."""
    for line_index, line in enumerate(query.split("\n")):
        start = line.find("<")
        if start == -1:
            continue
        end = line.find(">", start)
        if end != -1:
            return line_index, start, end - start + 1
    return None


class TemplateStore(FileStore):
    """File-backed template list (~/.sqli/templates.sql)."""

    suffix = ".sql"
    _instance: TemplateStore | None = None

    def __init__(self, file_path: Path | None = None) -> None:
        super().__init__(file_path or CONFIG_DIR / "templates.sql")
        self.templates: list[Template] = []

    @classmethod
    def get_instance(cls) -> TemplateStore:
        """Get the singleton instance, loaded from disk."""
        if cls._instance is None:
            cls._instance = cls()
            cls._instance.load()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None

    def load(self) -> list[Template]:
        content = self._read_text()
        self.templates = parse_templates(content) if content else []
        return self.templates

    def save(self, templates: list[Template] | None = None) -> None:
        """Write templates to disk; the in-memory list only changes once the write succeeds."""
        templates = self.templates if templates is None else templates
        self._write_text(serialize_templates(templates))
        self.templates = list(templates)
        logger.debug("Saved %d templates to %s", len(templates), self.file_path)

    def for_connection(self, connection_name: str) -> list[tuple[int, Template]]:
        """Templates offered for a connection, with their index in the store."""
        return [(i, t) for i, t in enumerate(self.templates) if t.scope.matches(connection_name)]

    def add(self, template: Template) -> None:
        self.save(self.templates + [template])

    def replace(self, index: int, template: Template) -> None:
        templates = list(self.templates)
        templates[index] = template
        self.save(templates)

    def delete(self, index: int) -> bool:
        if not 0 <= index < len(self.templates):
            return False
        self.save(self.templates[:index] + self.templates[index + 1 :])
        return True
