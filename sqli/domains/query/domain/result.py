"""Query result types."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Union

NULL_DISPLAY = "NULL"


@dataclass(frozen=True)
class SelectResult:
    """Rows returned by a statement, every cell already rendered as text."""

    columns: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)


@dataclass(frozen=True)
class ExecuteResult:
    """Outcome of a statement that returns no rows."""

    rows_affected: int


QueryResult = Union[SelectResult, ExecuteResult]


def format_cell(value: Any) -> str:
    if value is None:
        return NULL_DISPLAY
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    if isinstance(value, datetime.datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def make_select_result(columns: list[str], rows: list[Any]) -> SelectResult:
    """Build a SelectResult from raw driver rows."""
    width = len(columns)
    formatted = []
    for row in rows:
        cells = tuple(format_cell(value) for value in row)
        if len(cells) < width:
            cells = cells + ("",) * (width - len(cells))
        formatted.append(cells[:width])
    return SelectResult(columns=tuple(str(c) for c in columns), rows=tuple(formatted))
