"""Document parser building lines, commands and sections from a script."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from tenkiconv.codec.script_file import read_script
from tenkiconv.config import get_logger
from tenkiconv.exceptions import MalformedHeaderError, MalformedInputError
from tenkiconv.parser.classifier import SECTION_PATTERN, classify
from tenkiconv.parser.models import (
    Command,
    Document,
    Line,
    LineKind,
    Section,
    TextCommand,
)
from tenkiconv.storage.section_store import SectionStore

logger = get_logger(__name__)

SectionResolver = Callable[[str], Section]

TEXT_KINDS = (LineKind.TEXT, LineKind.TEXT_CONTINUATION)


@dataclass
class ParseState:
    """Accumulator threaded through one parse."""

    section: Section | None = None
    command_index: int = 0
    previous: Line | None = None
    open_text: TextCommand | None = None

    @property
    def previous_kind(self) -> LineKind:
        return self.previous.kind if self.previous is not None else LineKind.NONE


def _require_section(
    state: ParseState, line_text: str, position: int, kind: LineKind
) -> Section:
    if state.section is None:
        raise MalformedInputError(
            message=f"Script line {position} appears before any section header",
            hint="Every script must start with a ***SS_ or ***SC_ header line.",
            details={"line": position, "kind": kind.value, "text": line_text},
        )
    return state.section


def parse_lines(
    lines: Iterable[str],
    resolve_section: SectionResolver,
    source_path: Path | None = None,
) -> Document:
    """Parse raw script lines into a document.

    Args:
        lines: Script lines without terminators, in file order
        resolve_section: Loads the section for a scene id found in a header
        source_path: Script file the lines came from, if any

    Returns:
        The parsed document

    Raises:
        MalformedInputError: If a command or text line precedes every header
        MalformedHeaderError: If a header does not carry a scene id
    """
    document = Document(source_path=source_path)
    state = ParseState()

    for position, text in enumerate(lines):
        kind = classify(text)
        command: Command | None = None

        if kind is LineKind.SECTION_HEADER:
            match = SECTION_PATTERN.match(text)
            if not match:
                raise MalformedHeaderError(
                    message=f"Section header on line {position} has no scene id",
                    hint="Headers look like ***SS_a01_02_<title>.",
                    details={"line": position, "text": text},
                )
            state.section = resolve_section(match.group("scene"))
            state.section.scene_id = state.section.scene_id or match.group("scene")
            state.command_index = 0
            state.open_text = None
            document.sections.append(state.section)
            line = Line(kind, text, position)

        elif kind is LineKind.TEXT and state.previous_kind in TEXT_KINDS:
            assert state.open_text is not None
            line = Line(LineKind.TEXT_CONTINUATION, text, position)
            state.open_text.add_continuation(line)

        elif kind is LineKind.TEXT:
            section = _require_section(state, text, position, kind)
            text_command = TextCommand(section, state.command_index)
            if state.previous_kind is LineKind.SPEAKER:
                text_command.name_line = state.previous
            state.open_text = text_command
            command = text_command
            line = Line(kind, text, position)

        elif kind is LineKind.COMMAND:
            section = _require_section(state, text, position, kind)
            command = Command(section, state.command_index)
            line = Line(kind, text, position)

        else:
            line = Line(kind, text, position)

        if command is not None:
            command.attach_source(line)
            command.section.commands.append(command)
            document.commands.append(command)
            state.command_index += 1

        document.lines.append(line)
        state.previous = line

    logger.debug(
        "Parsed script lines",
        source=str(source_path) if source_path else None,
        lines=len(document.lines),
        commands=len(document.commands),
        sections=len(document.sections),
    )
    return document


class DocumentParser:
    """Parse script files, loading section records from disk."""

    def __init__(self, encoding: str = "cp932", section_extension: str = ".spt"):
        """Initialize the parser.

        Args:
            encoding: Codec of the script text
            section_extension: Extension of the section record files
        """
        self.encoding = encoding
        self.section_extension = section_extension

    def parse_file(self, path: Path) -> tuple[Document, SectionStore]:
        """Parse a script file and load every section its headers name.

        Args:
            path: A .txt or .meta script

        Returns:
            The document and the store owning its sections
        """
        path = Path(path)
        store = SectionStore(path.parent, self.section_extension)
        lines = read_script(path, self.encoding)
        logger.debug(f"Parsing script file: {path}")
        document = parse_lines(lines, store.open_scene, source_path=path)
        return document, store
