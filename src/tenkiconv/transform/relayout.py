"""Re-layout of text commands whose line count changes."""

from __future__ import annotations

from collections.abc import Sequence

from tenkiconv.exceptions import StructuralMismatchError
from tenkiconv.parser.models import (
    CONTINUATION_MARKER,
    Document,
    Line,
    LineKind,
    TextCommand,
)


def _span_start(document: Document, command: TextCommand) -> int:
    """Position of the command's source line, checked against the document."""
    source = command.source_line
    assert source is not None
    start = source.position
    span = command.text_lines()
    attached = start + len(span) <= len(document.lines) and all(
        document.lines[start + offset] is line for offset, line in enumerate(span)
    )
    if not attached:
        raise StructuralMismatchError(
            message="Text command lines are not where their numbering says",
            hint="Validate the document before changing its text.",
            details={
                "section": command.section.name,
                "index": command.index,
                "position": start,
            },
        )
    return start


def _shift(document: Document, start: int, delta: int) -> None:
    for line in document.lines[start:]:
        line.position += delta


def relayout(
    document: Document, command: TextCommand, new_texts: Sequence[str]
) -> None:
    """Give a text command exactly ``len(new_texts)`` dialogue lines.

    Continuation lines are dropped from or appended to the end of the
    command's span, and every later line is renumbered. The record's line
    count is updated here; its line offset is not, because commands further
    down the document may still move (see update_line_offsets).

    Args:
        document: Document owning the command
        command: Text command to re-layout
        new_texts: Dialogue lines to hold, at least one

    Raises:
        ValueError: If new_texts is empty
        StructuralMismatchError: If the command's lines are detached from
            the document
    """
    if not new_texts:
        raise ValueError("A text command needs at least one line of text")

    start = _span_start(document, command)
    old_count = command.line_span
    new_count = len(new_texts)

    if new_count < old_count:
        removed = old_count - new_count
        del document.lines[start + new_count : start + old_count]
        del command.continuation_lines[new_count - 1 :]
        _shift(document, start + new_count, -removed)

    elif new_count > old_count:
        added = new_count - old_count
        insert_at = start + old_count
        new_lines = [
            Line(LineKind.TEXT_CONTINUATION, CONTINUATION_MARKER, insert_at + i)
            for i in range(added)
        ]
        for line in new_lines:
            command.add_continuation(line)
        document.lines[insert_at:insert_at] = new_lines
        _shift(document, insert_at + added, added)

    for line, text in zip(command.text_lines(), new_texts, strict=True):
        line.text = text

    command.record.line_count = command.expected_line_count


def update_line_offsets(document: Document) -> None:
    """Point every text record at the first line of its command.

    Must run after all re-layouts of a pass so earlier shifts are settled.
    """
    for command in document.text_commands():
        command.record.line_offset = command.first_line.position
