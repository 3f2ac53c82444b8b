"""Inject translated text back into an externalized document."""

from __future__ import annotations

import re

from tenkiconv.config import get_logger
from tenkiconv.exceptions import CorruptPlaceholderError
from tenkiconv.parser.classifier import SPEAKER_PATTERN, classify
from tenkiconv.parser.models import (
    CONTINUATION_MARKER,
    LINE_PLACEHOLDER_PREFIX,
    NAME_PLACEHOLDER_PREFIX,
    Document,
    Line,
    LineKind,
    TextCommand,
    TranslationTables,
)
from tenkiconv.transform.relayout import relayout, update_line_offsets

logger = get_logger(__name__)

# Real line breaks, plus the two-character "\n" translators type in sheets
TEXT_BREAK = re.compile(r"\r\n|\r|\n|\\n")


def split_text(text: str) -> list[str]:
    """Split injected text into script lines; always at least one."""
    return TEXT_BREAK.split(text)


def _placeholder_id(text: str, prefix: str, line: Line) -> int:
    number = text[len(prefix) :] if text.startswith(prefix) else ""
    if not (number.isascii() and number.isdigit()):
        raise CorruptPlaceholderError(
            message=f"Line {line.position} does not hold a {prefix} placeholder",
            hint="Placeholder lines in the .meta file must not be edited.",
            details={"line": line.position, "text": line.text},
        )
    return int(number)


def _lookup(table: dict[int, str], key: int, prefix: str, line: Line) -> str:
    if key not in table:
        raise CorruptPlaceholderError(
            message=f"No translation table entry for {prefix}{key}",
            hint="Check that the .csv and .meta files come from the same export.",
            details={"line": line.position, "id": f"{prefix}{key}"},
        )
    return table[key]


def _warn_if_reclassified(line: Line, expected: LineKind) -> None:
    kind = classify(line.text)
    if kind is not expected:
        logger.warning(
            "Injected text will parse as a different line kind",
            line=line.position,
            expected=expected.value,
            actual=kind.value,
            text=line.text,
        )


def _internalize_command(
    document: Document, command: TextCommand, tables: TranslationTables
) -> None:
    source = command.source_line
    assert source is not None
    line_id = _placeholder_id(source.text, LINE_PLACEHOLDER_PREFIX, source)

    for line in command.continuation_lines:
        if line.text != CONTINUATION_MARKER:
            raise CorruptPlaceholderError(
                message=f"Continuation marker on line {line.position} was edited",
                hint=f"Lines after a placeholder must read {CONTINUATION_MARKER}.",
                details={"line": line.position, "text": line.text},
            )

    texts = split_text(_lookup(tables.lines, line_id, LINE_PLACEHOLDER_PREFIX, source))
    relayout(document, command, texts)
    for line in command.text_lines():
        _warn_if_reclassified(line, LineKind.TEXT)

    name_line = command.name_line
    if name_line is None:
        return

    match = SPEAKER_PATTERN.match(name_line.text)
    key = match.group("name") if match else name_line.text
    name_id = _placeholder_id(key, NAME_PLACEHOLDER_PREFIX, name_line)
    name = _lookup(tables.names, name_id, NAME_PLACEHOLDER_PREFIX, name_line)
    name_line.text = name + name_line.text[len(key) :]
    _warn_if_reclassified(name_line, LineKind.SPEAKER)


def internalize(document: Document) -> Document:
    """Replace placeholders with table text and recompute the layout.

    Text commands are re-laid out in document order, then every text
    record's line offset is refreshed in a second pass once all positions
    are final. Does nothing if the document holds no tables.

    Args:
        document: Externalized document, modified in place

    Returns:
        The same document with ``tables`` cleared

    Raises:
        CorruptPlaceholderError: If a placeholder is missing or unknown
    """
    tables = document.tables
    if tables is None:
        return document

    commands = list(document.text_commands())
    for command in commands:
        _internalize_command(document, command, tables)

    update_line_offsets(document)
    document.tables = None

    logger.info(
        "Internalized script",
        source=str(document.source_path) if document.source_path else None,
        commands=len(commands),
        lines=len(document.lines),
    )
    return document
