"""Cursor, scrolling and visual selection over a result grid."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from sqli.domains.query.domain.result import QueryResult, SelectResult

MIN_COLUMN_WIDTH = 12
MAX_COLUMN_WIDTH = 50
COLUMN_PADDING = 2


def column_widths(result: SelectResult) -> list[int]:
    """Display width of each column: widest of header and cells plus padding, clamped."""
    widths = []
    for index, header in enumerate(result.columns):
        widest = len(header)
        for row in result.rows:
            if index < len(row):
                widest = max(widest, len(row[index]))
        widths.append(max(MIN_COLUMN_WIDTH, min(widest + COLUMN_PADDING, MAX_COLUMN_WIDTH)))
    return widths


@dataclass(frozen=True)
class CellSelection:
    anchor_row: int
    anchor_col: int


@dataclass(frozen=True)
class LineSelection:
    anchor_row: int


VisualSelection = Union[CellSelection, LineSelection]


@dataclass
class Viewport:
    """Vertical and horizontal position within the current result.

    Invariants after every motion: ``cursor`` is within [0, row_count - 1]
    (0 when empty) and within [scroll, scroll + visible_height).
    """

    row_count: int = 0
    widths: list[int] = field(default_factory=list)
    cursor: int = 0
    scroll: int = 0
    selected_col: int = 0
    h_scroll: int = 0
    visual: VisualSelection | None = None

    def load(self, result: QueryResult | None) -> None:
        """Reset all positions for a new result."""
        if isinstance(result, SelectResult):
            self.row_count = result.row_count
            self.widths = column_widths(result)
        else:
            self.row_count = 0
            self.widths = []
        self.cursor = 0
        self.scroll = 0
        self.selected_col = 0
        self.h_scroll = 0
        self.visual = None

    @property
    def total_width(self) -> int:
        return sum(self.widths)

    # Vertical

    def move_cursor(self, delta: int, visible_height: int) -> None:
        visible_height = max(1, visible_height)
        if self.row_count == 0:
            self.cursor = 0
            self.scroll = 0
            return
        self.cursor = max(0, min(self.cursor + delta, self.row_count - 1))
        if self.cursor < self.scroll:
            self.scroll = self.cursor
        elif self.cursor >= self.scroll + visible_height:
            self.scroll = self.cursor - visible_height + 1

    def scroll_to_start(self) -> None:
        self.cursor = 0
        self.scroll = 0

    def scroll_to_end(self) -> None:
        last = max(0, self.row_count - 1)
        self.cursor = last
        self.scroll = last

    # Horizontal

    def column_span(self, index: int) -> tuple[int, int]:
        start = sum(self.widths[:index])
        return start, start + self.widths[index]

    def select_column(self, index: int, visible_width: int) -> None:
        """Select a column and scroll just enough to show all of it."""
        if not self.widths:
            self.selected_col = 0
            self.h_scroll = 0
            return
        self.selected_col = max(0, min(index, len(self.widths) - 1))
        start, end = self.column_span(self.selected_col)
        if start < self.h_scroll or end - start > visible_width:
            self.h_scroll = start
        elif end > self.h_scroll + visible_width:
            self.h_scroll = end - visible_width

    def move_column(self, delta: int, visible_width: int) -> None:
        self.select_column(self.selected_col + delta, visible_width)

    def first_column(self) -> None:
        self.selected_col = 0
        self.h_scroll = 0

    def last_column(self, visible_width: int) -> None:
        if not self.widths:
            return
        self.selected_col = len(self.widths) - 1
        self.h_scroll = max(0, self.total_width - visible_width)

    # Visual selection

    def toggle_cell_selection(self) -> None:
        if isinstance(self.visual, CellSelection):
            self.visual = None
        else:
            self.visual = CellSelection(self.cursor, self.selected_col)

    def toggle_line_selection(self) -> None:
        if isinstance(self.visual, LineSelection):
            self.visual = None
        else:
            self.visual = LineSelection(self.cursor)

    def clear_selection(self) -> None:
        self.visual = None

    def row_range(self) -> tuple[int, int]:
        """Inclusive row range of the selection (just the cursor row without one)."""
        if self.visual is None:
            return self.cursor, self.cursor
        anchor = self.visual.anchor_row
        return min(anchor, self.cursor), max(anchor, self.cursor)

    def col_range(self) -> tuple[int, int]:
        """Inclusive column range of the selection."""
        visual = self.visual
        if isinstance(visual, LineSelection):
            return 0, max(0, len(self.widths) - 1)
        if isinstance(visual, CellSelection):
            return min(visual.anchor_col, self.selected_col), max(visual.anchor_col, self.selected_col)
        return self.selected_col, self.selected_col

    def is_selected(self, row: int, col: int) -> bool:
        if self.visual is None:
            return False
        first_row, last_row = self.row_range()
        first_col, last_col = self.col_range()
        return first_row <= row <= last_row and first_col <= col <= last_col

    def selected_text(self, result: SelectResult) -> str:
        """Tab-separated text of the selection, one line per row."""
        if not result.rows:
            return ""
        first_row, last_row = self.row_range()
        first_col, last_col = self.col_range()
        lines = []
        for row in result.rows[first_row : last_row + 1]:
            lines.append("\t".join(row[first_col : last_col + 1]))
        return "\n".join(lines)
