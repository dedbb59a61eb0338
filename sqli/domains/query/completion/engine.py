"""SQL completion: word extraction, context detection and ranking."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import NamedTuple, Union

MAX_SUGGESTIONS = 15

SQL_KEYWORDS = [
    "SELECT", "FROM", "WHERE", "AND", "OR", "NOT", "IN", "IS", "NULL",
    "LIKE", "ILIKE", "BETWEEN", "EXISTS", "CASE", "WHEN", "THEN", "ELSE", "END",
    "AS", "ON", "USING", "JOIN", "INNER", "LEFT", "RIGHT", "FULL", "OUTER", "CROSS",
    "ORDER", "BY", "ASC", "DESC", "NULLS", "FIRST", "LAST",
    "GROUP", "HAVING", "LIMIT", "OFFSET", "FETCH", "NEXT", "ROWS", "ONLY",
    "UNION", "INTERSECT", "EXCEPT", "ALL", "DISTINCT",
    "INSERT", "INTO", "VALUES", "DEFAULT", "RETURNING",
    "UPDATE", "SET",
    "DELETE", "TRUNCATE",
    "CREATE", "ALTER", "DROP", "TABLE", "INDEX", "VIEW", "SCHEMA", "DATABASE",
    "PRIMARY", "KEY", "FOREIGN", "REFERENCES", "UNIQUE", "CHECK", "CONSTRAINT",
    "TRUE", "FALSE",
    "COUNT", "SUM", "AVG", "MIN", "MAX", "COALESCE", "NULLIF", "CAST",
    "WITH", "RECURSIVE",
]  # fmt: skip

# Words that can follow a table name without being its alias
RESERVED_WORDS = frozenset(kw.lower() for kw in SQL_KEYWORDS)

# Keywords after which a table name is expected; any JOIN variant ends in JOIN
_TABLE_CONTEXT = re.compile(
    r"\b(?:FROM|JOIN|INTO|UPDATE|TABLE|TRUNCATE)\s+\w*$",
    re.IGNORECASE,
)


class SuggestionKind(Enum):
    KEYWORD = auto()
    TABLE = auto()
    COLUMN = auto()


class Suggestion(NamedTuple):
    text: str
    kind: SuggestionKind


@dataclass(frozen=True)
class GeneralContext:
    """Keywords and tables."""


@dataclass(frozen=True)
class TableContext:
    """After FROM, JOIN, INTO, UPDATE, TABLE or TRUNCATE."""


@dataclass(frozen=True)
class ColumnContext:
    """After ``<table_or_alias>.``."""

    table_or_alias: str


CompletionContext = Union[GeneralContext, TableContext, ColumnContext]


@dataclass
class TableRef:
    """A table reference with optional alias."""

    name: str
    alias: str | None = None


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def current_word(text: str, cursor: int) -> tuple[str, int]:
    """Return the identifier run ending at ``cursor`` and its start offset."""
    cursor = max(0, min(cursor, len(text)))
    start = cursor
    while start > 0 and _is_ident_char(text[start - 1]):
        start -= 1
    return text[start:cursor], start


def detect_context(text: str, cursor: int) -> CompletionContext:
    """Work out what kind of name is being typed at ``cursor``."""
    before = text[: max(0, min(cursor, len(text)))]

    dot = before.rfind(".")
    if dot != -1 and all(_is_ident_char(ch) for ch in before[dot + 1 :]):
        qualifier, _ = current_word(before, dot)
        if qualifier:
            return ColumnContext(qualifier)

    if _TABLE_CONTEXT.search(before):
        return TableContext()

    return GeneralContext()


def get_suggestions(
    context: CompletionContext,
    prefix: str,
    tables: list[str],
    columns: list[str],
) -> list[Suggestion]:
    """Candidates for ``context`` matching ``prefix`` (case-insensitive).

    Candidates starting with ``prefix`` exactly (case-sensitive) come first,
    then the rest; both groups are sorted lexicographically. At most
    ``MAX_SUGGESTIONS`` are returned.
    """
    candidates: list[Suggestion] = []
    if isinstance(context, GeneralContext):
        candidates.extend(Suggestion(kw, SuggestionKind.KEYWORD) for kw in SQL_KEYWORDS)
        candidates.extend(Suggestion(t, SuggestionKind.TABLE) for t in tables)
    elif isinstance(context, TableContext):
        candidates.extend(Suggestion(t, SuggestionKind.TABLE) for t in tables)
    elif isinstance(context, ColumnContext):
        candidates.extend(Suggestion(c, SuggestionKind.COLUMN) for c in columns)
    else:
        raise TypeError(f"Unknown completion context: {context!r}")

    prefix_lower = prefix.lower()
    matches = [s for s in candidates if s.text.lower().startswith(prefix_lower)]
    matches.sort(key=lambda s: (not s.text.startswith(prefix), s.text))
    return matches[:MAX_SUGGESTIONS]


def extract_table_refs(sql: str) -> list[TableRef]:
    """Extract ``FROM``/``JOIN``/``UPDATE`` table references and their aliases.

    Handles ``FROM users``, ``FROM users u``, ``JOIN orders AS o`` and
    quoted names (``"users"``, `` `users` ``).
    """
    ident = r'(?:"([^"]+)"|`([^`]+)`|(\w+))'
    pattern = r"\b(?:FROM|JOIN|UPDATE)\s+" + r"(?:\w+\.)?" + ident + r"(?:\s+(?:AS\s+)?(\w+))?"

    refs: list[TableRef] = []
    for match in re.finditer(pattern, sql, re.IGNORECASE):
        groups = match.groups()
        table = next((g for g in groups[0:3] if g is not None), None)
        alias = groups[3]
        if alias and alias.lower() in RESERVED_WORDS:
            alias = None
        if table:
            refs.append(TableRef(name=table, alias=alias))
    return refs


def resolve_alias(sql: str, table_or_alias: str) -> str:
    """Map an alias to its table name; unknown names are returned unchanged."""
    wanted = table_or_alias.lower()
    for ref in extract_table_refs(sql):
        if ref.alias and ref.alias.lower() == wanted:
            return ref.name
    return table_or_alias
