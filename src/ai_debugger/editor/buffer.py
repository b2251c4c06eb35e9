"""
In-memory text model of the code editor.

Positions are 1-based lines and 1-based columns, where the maximum column of
a line sits just past its last character. Every call to ``execute_edits``
is one entry on the undo history, however many edits it carries.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ai_debugger.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Position:
    line: int
    column: int


@dataclass(frozen=True)
class Range:
    """A span of text between two positions, start inclusive, end exclusive."""
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @property
    def start(self) -> Position:
        return Position(self.start_line, self.start_column)

    @property
    def end(self) -> Position:
        return Position(self.end_line, self.end_column)

    @classmethod
    def collapsed(cls, line: int, column: int = 1) -> "Range":
        """An empty range, i.e. a cursor."""
        return cls(line, column, line, column)


@dataclass(frozen=True)
class TextEdit:
    range: Range
    text: str


@dataclass(frozen=True)
class _UndoEntry:
    source: str
    text: str
    selection: Range


class BufferDisposedError(RuntimeError):
    """Raised when a disposed buffer is edited."""
    pass


class EditorBuffer:
    """
    Editable text with a selection, a scrolled view and an undo history.

    The view is described by the first visible line and the number of lines
    that fit in the viewport; revealing a line in the center moves the first
    visible line so that the requested line sits in the middle.
    """

    def __init__(self, text: str = "", viewport_height: int = 20):
        self._lines: List[str] = text.split("\n")
        self._undo_stack: List[_UndoEntry] = []
        self._redo_stack: List[_UndoEntry] = []
        self.selection: Range = Range.collapsed(1, 1)
        self.viewport_height = max(1, viewport_height)
        self.first_visible_line = 1
        self.focused = False
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        self._disposed = True

    def get_value(self) -> str:
        return "\n".join(self._lines)

    def set_value(self, text: str) -> None:
        """Replace the whole buffer as one undoable edit."""
        last = self.line_count
        self.execute_edits(
            "set-value",
            [TextEdit(Range(1, 1, last, self.line_max_column(last)), text)],
        )

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def line_content(self, line: int) -> str:
        self._check_line(line)
        return self._lines[line - 1]

    def line_max_column(self, line: int) -> int:
        """Column just past the last character of a line."""
        return len(self.line_content(line)) + 1

    def validate_position(self, position: Position) -> Position:
        """Clamp a position into the buffer."""
        line = min(max(1, position.line), self.line_count)
        column = min(max(1, position.column), self.line_max_column(line))
        return Position(line, column)

    def get_value_in_range(self, range_: Range) -> str:
        text = self.get_value()
        return text[self._offset(range_.start):self._offset(range_.end)]

    @property
    def visible_range(self) -> Tuple[int, int]:
        """First and last line shown in the viewport."""
        last = min(self.line_count, self.first_visible_line + self.viewport_height - 1)
        return self.first_visible_line, last

    def execute_edits(self, source: str, edits: Sequence[TextEdit]) -> Range:
        """
        Apply edits as a single undoable step.

        Edits are applied from the bottom of the buffer upwards so that the
        ranges given by the caller stay valid. The selection is placed at the
        end of the text inserted by the last edit in document order.

        Args:
            source: Name of the action performing the edit, for logging
            edits: Non-overlapping edits expressed against the current text

        Returns:
            The new selection
        """
        if self._disposed:
            raise BufferDisposedError("Cannot edit a disposed buffer")
        if not edits:
            return self.selection

        before = _UndoEntry(source, self.get_value(), self.selection)
        text = before.text

        ordered = sorted(edits, key=lambda e: self._offset(e.range.start))
        for edit in reversed(ordered):
            start = self._offset(edit.range.start)
            end = self._offset(edit.range.end)
            text = text[:start] + edit.text + text[end:]

        last = ordered[-1]
        # Earlier edits shift the end of the last one by their change in length
        cursor_offset = self._offset(last.range.start) + len(last.text)
        for edit in ordered[:-1]:
            cursor_offset += len(edit.text) - (
                self._offset(edit.range.end) - self._offset(edit.range.start)
            )

        self._lines = text.split("\n")
        self._undo_stack.append(before)
        self._redo_stack.clear()

        cursor = self._position_at(cursor_offset)
        self.selection = Range.collapsed(cursor.line, cursor.column)
        logger.debug(f"Applied {len(edits)} edit(s) from '{source}'")
        return self.selection

    def undo(self) -> bool:
        """Revert the last edit. Returns False when there is nothing to undo."""
        if not self._undo_stack:
            return False
        entry = self._undo_stack.pop()
        self._redo_stack.append(_UndoEntry(entry.source, self.get_value(), self.selection))
        self._restore(entry)
        return True

    def redo(self) -> bool:
        """Reapply the last undone edit. Returns False when there is nothing to redo."""
        if not self._redo_stack:
            return False
        entry = self._redo_stack.pop()
        self._undo_stack.append(_UndoEntry(entry.source, self.get_value(), self.selection))
        self._restore(entry)
        return True

    @property
    def undo_depth(self) -> int:
        return len(self._undo_stack)

    def reveal_line_in_center(self, line: int) -> None:
        line = min(max(1, line), self.line_count)
        self.first_visible_line = max(1, line - self.viewport_height // 2)

    def set_selection(self, selection: Range) -> None:
        start = self.validate_position(selection.start)
        end = self.validate_position(selection.end)
        self.selection = Range(start.line, start.column, end.line, end.column)

    def focus(self) -> None:
        self.focused = True

    def _restore(self, entry: _UndoEntry) -> None:
        self._lines = entry.text.split("\n")
        self.selection = entry.selection

    def _check_line(self, line: int) -> None:
        if not 1 <= line <= self.line_count:
            raise ValueError(f"Line {line} is outside the buffer (1-{self.line_count})")

    def _offset(self, position: Position) -> int:
        position = self.validate_position(position)
        offset = sum(len(text) + 1 for text in self._lines[:position.line - 1])
        return offset + position.column - 1

    def _position_at(self, offset: int) -> Position:
        line = 1
        for text in self._lines:
            if offset <= len(text):
                return Position(line, offset + 1)
            offset -= len(text) + 1
            line += 1
        last = self.line_count
        return Position(last, self.line_max_column(last))


def buffer_from_file(path, viewport_height: int = 20) -> EditorBuffer:
    """Load a file into a new buffer."""
    with open(path, "r", encoding="utf-8") as f:
        return EditorBuffer(f.read(), viewport_height=viewport_height)
