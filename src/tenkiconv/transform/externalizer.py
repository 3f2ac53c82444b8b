"""Replace dialogue and speaker names with placeholder keys."""

from __future__ import annotations

from dataclasses import dataclass, field

from tenkiconv.config import get_logger
from tenkiconv.exceptions import CorruptPlaceholderError, MalformedSpeakerError
from tenkiconv.parser.classifier import SPEAKER_PATTERN
from tenkiconv.parser.models import (
    CONTINUATION_MARKER,
    LINE_PLACEHOLDER_PREFIX,
    NAME_PLACEHOLDER_PREFIX,
    Document,
    TextCommand,
    TranslationTables,
)

logger = get_logger(__name__)

PLACEHOLDER_SIGIL = "@"
TEXT_JOINER = "\n"
ALREADY_EXTERNALIZED_HINT = (
    "This script looks externalized already; convert the .csv instead."
)


@dataclass
class ExternalizeState:
    """Id allocation for one externalize pass."""

    next_line_id: int = 1
    next_name_id: int = 1
    name_ids: dict[str, int] = field(default_factory=dict)

    def name_id_for(self, name: str, tables: TranslationTables) -> int:
        """Reuse the id of an identical name or allocate the next one."""
        if name not in self.name_ids:
            self.name_ids[name] = self.next_name_id
            tables.names[self.next_name_id] = name
            self.next_name_id += 1
        return self.name_ids[name]


def _externalize_name(
    command: TextCommand,
    line_id: int,
    state: ExternalizeState,
    tables: TranslationTables,
) -> None:
    name_line = command.name_line
    assert name_line is not None
    match = SPEAKER_PATTERN.match(name_line.text)
    if not match:
        raise MalformedSpeakerError(
            message=f"Speaker line {name_line.position} has no display name",
            hint="Speaker lines look like 名前（０１２３）.",
            details={"line": name_line.position, "text": name_line.text},
        )

    name = match.group("name")
    if name.startswith(PLACEHOLDER_SIGIL):
        raise CorruptPlaceholderError(
            message=f"Speaker line {name_line.position} already holds a placeholder",
            hint=ALREADY_EXTERNALIZED_HINT,
            details={"line": name_line.position, "text": name_line.text},
        )

    name_id = state.name_id_for(name, tables)
    tables.speakers[line_id] = name
    name_line.text = f"{NAME_PLACEHOLDER_PREFIX}{name_id}{name_line.text[len(name):]}"


def externalize(document: Document) -> Document:
    """Move dialogue text into translation tables.

    Each text command's source line becomes ``@L{id}``, its continuation
    lines become ``@--`` and its speaker name becomes ``@N{id}``. Does nothing
    if the document is already externalized.

    Args:
        document: Parsed document, modified in place

    Returns:
        The same document with ``tables`` populated

    Raises:
        MalformedSpeakerError: If a name line carries no display name
        CorruptPlaceholderError: If text already holds a placeholder
    """
    if document.tables is not None:
        return document

    tables = TranslationTables()
    state = ExternalizeState()

    for command in document.text_commands():
        source = command.source_line
        assert source is not None
        if source.text.startswith(PLACEHOLDER_SIGIL):
            raise CorruptPlaceholderError(
                message=f"Text line {source.position} already holds a placeholder",
                hint=ALREADY_EXTERNALIZED_HINT,
                details={"line": source.position, "text": source.text},
            )

        line_id = state.next_line_id
        state.next_line_id += 1

        tables.lines[line_id] = TEXT_JOINER.join(
            line.text for line in command.text_lines()
        )
        source.text = f"{LINE_PLACEHOLDER_PREFIX}{line_id}"
        for line in command.continuation_lines:
            line.text = CONTINUATION_MARKER

        if command.name_line is not None:
            _externalize_name(command, line_id, state, tables)

    document.tables = tables
    logger.info(
        "Externalized script",
        source=str(document.source_path) if document.source_path else None,
        lines=len(tables.lines),
        names=len(tables.names),
    )
    return document
