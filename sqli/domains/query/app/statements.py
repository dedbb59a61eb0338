"""Statement preprocessing for sqli.

This module provides:
- Comment stripping (respecting string literals)
- Statement splitting on semicolons outside string literals
- Read-only classification by leading keyword
"""

from __future__ import annotations

import re

READ_ONLY_KEYWORDS = frozenset(
    ["SELECT", "SHOW", "DESCRIBE", "DESC", "EXPLAIN", "WITH", "USE", "HELP", "LIST"]
)

_LEADING_KEYWORD = re.compile(r"[A-Za-z_]+")


def strip_comments(sql: str) -> str:
    """Remove ``--`` and ``/* */`` comments outside string literals.

    Newlines inside removed comments are kept so line numbers stay stable.
    Quotes are escaped by doubling ('' and "").
    """
    result: list[str] = []
    in_single_quote = False
    in_double_quote = False
    i = 0
    n = len(sql)

    while i < n:
        char = sql[i]
        nxt = sql[i + 1] if i + 1 < n else ""

        if char == "'" and not in_double_quote:
            if in_single_quote and nxt == "'":
                result.append("''")
                i += 2
                continue
            in_single_quote = not in_single_quote
            result.append(char)
            i += 1
            continue

        if char == '"' and not in_single_quote:
            if in_double_quote and nxt == '"':
                result.append('""')
                i += 2
                continue
            in_double_quote = not in_double_quote
            result.append(char)
            i += 1
            continue

        if not in_single_quote and not in_double_quote:
            if char == "-" and nxt == "-":
                end = sql.find("\n", i)
                if end == -1:
                    break
                result.append("\n")
                i = end + 1
                continue
            if char == "/" and nxt == "*":
                end = sql.find("*/", i + 2)
                body = sql[i + 2 : end if end != -1 else n]
                result.append("\n" * body.count("\n"))
                if end == -1:
                    break
                i = end + 2
                continue

        result.append(char)
        i += 1

    return "".join(result)


def split_statements(sql: str) -> list[str]:
    """Split SQL on semicolons outside string literals.

    Empty statements are dropped and each statement is stripped.
    """
    statements: list[str] = []
    current: list[str] = []
    in_single_quote = False
    in_double_quote = False
    i = 0
    n = len(sql)

    while i < n:
        char = sql[i]
        nxt = sql[i + 1] if i + 1 < n else ""

        # Doubled quotes are an escaped quote, not the end of the literal
        if char == "'" and in_single_quote and nxt == "'":
            current.append("''")
            i += 2
            continue
        if char == '"' and in_double_quote and nxt == '"':
            current.append('""')
            i += 2
            continue

        if char == "'" and not in_double_quote:
            in_single_quote = not in_single_quote
            current.append(char)
        elif char == '"' and not in_single_quote:
            in_double_quote = not in_double_quote
            current.append(char)
        elif char == ";" and not in_single_quote and not in_double_quote:
            stmt = "".join(current).strip()
            if stmt:
                statements.append(stmt)
            current = []
        else:
            current.append(char)
        i += 1

    stmt = "".join(current).strip()
    if stmt:
        statements.append(stmt)
    return statements


def leading_keyword(statement: str) -> str:
    match = _LEADING_KEYWORD.match(statement.lstrip())
    return match.group(0).upper() if match else ""


def is_read_query(statement: str) -> bool:
    """Whether a statement is allowed on a read-only connection."""
    return leading_keyword(statement) in READ_ONLY_KEYWORDS


def prepare_statements(raw_query: str) -> list[str]:
    """Strip comments and split the editor text into statements."""
    return split_statements(strip_comments(raw_query))
