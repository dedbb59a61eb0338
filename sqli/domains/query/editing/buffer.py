"""Headless multi-line text buffer backing the query editor."""

from __future__ import annotations

from dataclasses import dataclass, field


def _is_word_char(ch: str) -> bool:
    """Check if character is a word character (vim 'word')."""
    return ch.isalnum() or ch == "_"


@dataclass
class QueryBuffer:
    """Editable text with a (row, col) cursor.

    Columns are character offsets within a line; the cursor may sit one past
    the last character.
    """

    lines: list[str] = field(default_factory=lambda: [""])
    row: int = 0
    col: int = 0

    @classmethod
    def from_text(cls, text: str) -> QueryBuffer:
        buffer = cls()
        buffer.set_text(text)
        return buffer

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def cursor(self) -> tuple[int, int]:
        return self.row, self.col

    def is_empty(self) -> bool:
        return not self.text.strip()

    def set_text(self, text: str, cursor: tuple[int, int] | None = None) -> None:
        """Replace the content; the cursor goes to ``cursor`` or the end of the text."""
        self.lines = text.split("\n") or [""]
        if cursor is None:
            self.row = len(self.lines) - 1
            self.col = len(self.lines[self.row])
        else:
            self.move_to(*cursor)

    def move_to(self, row: int, col: int) -> None:
        self.row = max(0, min(row, len(self.lines) - 1))
        self.col = max(0, min(col, len(self.lines[self.row])))

    # Offsets are used by completion, which works on the flat text.

    def cursor_offset(self) -> int:
        return sum(len(line) + 1 for line in self.lines[: self.row]) + self.col

    def position_of(self, offset: int) -> tuple[int, int]:
        offset = max(0, offset)
        for row, line in enumerate(self.lines):
            if offset <= len(line):
                return row, offset
            offset -= len(line) + 1
        return len(self.lines) - 1, len(self.lines[-1])

    def replace_range(self, start: int, end: int, replacement: str) -> None:
        """Replace flat-text offsets [start, end) and put the cursor after the insert."""
        text = self.text
        start = max(0, min(start, len(text)))
        end = max(start, min(end, len(text)))
        self.set_text(text[:start] + replacement + text[end:])
        self.move_to(*self.position_of(start + len(replacement)))

    # Editing

    def insert(self, text: str) -> None:
        if "\n" in text:
            offset = self.cursor_offset()
            self.replace_range(offset, offset, text)
            return
        line = self.lines[self.row]
        self.lines[self.row] = line[: self.col] + text + line[self.col :]
        self.col += len(text)

    def newline(self) -> None:
        line = self.lines[self.row]
        self.lines[self.row] = line[: self.col]
        self.lines.insert(self.row + 1, line[self.col :])
        self.row += 1
        self.col = 0

    def backspace(self) -> None:
        if self.col > 0:
            line = self.lines[self.row]
            self.lines[self.row] = line[: self.col - 1] + line[self.col :]
            self.col -= 1
        elif self.row > 0:
            previous = self.lines[self.row - 1]
            self.lines[self.row - 1] = previous + self.lines.pop(self.row)
            self.row -= 1
            self.col = len(previous)

    def delete(self) -> None:
        line = self.lines[self.row]
        if self.col < len(line):
            self.lines[self.row] = line[: self.col] + line[self.col + 1 :]
        elif self.row < len(self.lines) - 1:
            self.lines[self.row] = line + self.lines.pop(self.row + 1)

    def delete_to_line_end(self) -> None:
        """Ctrl+K: delete to end of line, or join the next line when already there."""
        line = self.lines[self.row]
        if self.col < len(line):
            self.lines[self.row] = line[: self.col]
        else:
            self.delete()

    # Motions

    def move_left(self) -> None:
        if self.col > 0:
            self.col -= 1
        elif self.row > 0:
            self.row -= 1
            self.col = len(self.lines[self.row])

    def move_right(self) -> None:
        if self.col < len(self.lines[self.row]):
            self.col += 1
        elif self.row < len(self.lines) - 1:
            self.row += 1
            self.col = 0

    def move_up(self) -> None:
        if self.row > 0:
            self.move_to(self.row - 1, self.col)

    def move_down(self) -> None:
        if self.row < len(self.lines) - 1:
            self.move_to(self.row + 1, self.col)

    def move_home(self) -> None:
        self.col = 0

    def move_end(self) -> None:
        self.col = len(self.lines[self.row])

    def word_right(self) -> None:
        """Move to start of next word."""
        line = self.lines[self.row]
        col = self.col
        if col >= len(line):
            if self.row < len(self.lines) - 1:
                self.row += 1
                self.col = 0
            return
        # Skip current word
        while col < len(line) and _is_word_char(line[col]):
            col += 1
        # Skip punctuation and whitespace
        while col < len(line) and not _is_word_char(line[col]):
            col += 1
        self.col = col

    def word_left(self) -> None:
        """Move to start of previous word."""
        if self.col == 0:
            if self.row > 0:
                self.row -= 1
                self.col = len(self.lines[self.row])
            return
        line = self.lines[self.row]
        col = self.col
        while col > 0 and not _is_word_char(line[col - 1]):
            col -= 1
        while col > 0 and _is_word_char(line[col - 1]):
            col -= 1
        self.col = col
