"""
Applying suggested fixes to an editor buffer.

Line ranges come straight from the provider's reply, so they are narrowed to
the buffer instead of being rejected.
"""

from typing import Optional, Sequence

from ai_debugger.editor.buffer import EditorBuffer, Range, TextEdit
from ai_debugger.logging.logger import get_logger

logger = get_logger(__name__)


def clamp_line_range(line_range: Sequence[int], line_count: int) -> Range:
    """
    Narrow a 1-based inclusive line range to the lines of a buffer.

    The start is raised to at least 1 and the end lowered to at most
    ``line_count``. A range lying entirely below the buffer collapses onto
    its last line.
    """
    start, end = line_range
    start = max(1, start)
    end = max(1, min(line_count, end))
    start = min(start, end)
    return Range(start, 1, end, 1)


def apply_fix(
    buffer: Optional[EditorBuffer],
    line_range: Optional[Sequence[int]],
    suggested_fix: str,
) -> Optional[Range]:
    """
    Apply a suggested fix to the buffer as one undoable edit.

    Without a line range the fix is appended after a blank line and nothing
    is overwritten. With a range, whole lines from the start of the first to
    the end of the last are replaced.

    Args:
        buffer: The editor buffer, None or disposed makes this a no-op
        line_range: 1-based inclusive ``[start, end]`` or None
        suggested_fix: Replacement text

    Returns:
        The replaced range (the insertion point when appending), or None if
        nothing was applied
    """
    if buffer is None or buffer.disposed:
        return None

    if line_range is None or len(line_range) != 2:
        last = buffer.line_count
        end_column = buffer.line_max_column(last)
        target = Range.collapsed(last, end_column)
        buffer.execute_edits("append-fix", [TextEdit(target, "\n\n" + suggested_fix)])
        logger.info("Appended suggested fix to the end of the buffer")
        reveal_region(buffer, last + 2)
        return target

    lines = clamp_line_range(line_range, buffer.line_count)
    target = Range(
        lines.start_line, 1, lines.end_line, buffer.line_max_column(lines.end_line)
    )
    buffer.execute_edits("apply-fix", [TextEdit(target, suggested_fix)])
    logger.info(f"Applied suggested fix to lines {target.start_line}-{target.end_line}")
    reveal_region(buffer, target.start_line)
    return target


def reveal_region(buffer: EditorBuffer, line: int) -> None:
    """Scroll an edited line into view while keeping the selection set by the edit."""
    buffer.reveal_line_in_center(line)
    buffer.focus()


def reveal_line(buffer: Optional[EditorBuffer], line: Optional[int]) -> bool:
    """
    Center a line in the view and put the cursor at its start.

    A missing line number (None or 0), a missing buffer or a disposed buffer
    makes this a no-op.

    Returns:
        True if the view moved
    """
    if buffer is None or buffer.disposed or not line:
        return False

    line = min(max(1, line), buffer.line_count)
    buffer.reveal_line_in_center(line)
    buffer.set_selection(Range.collapsed(line, 1))
    buffer.focus()
    return True
