"""Data models for the scene script document."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any

LINE_PLACEHOLDER_PREFIX = "@L"
NAME_PLACEHOLDER_PREFIX = "@N"
CONTINUATION_MARKER = "@--"


class LineKind(str, Enum):
    """Classification of a single script line."""

    NONE = "none"
    TEXT = "text"
    TEXT_CONTINUATION = "text_continuation"
    SPEAKER = "speaker"
    COMMAND = "command"
    SECTION_HEADER = "section_header"


class RecordType(IntEnum):
    """Known command tags of a section record."""

    TEXT = 0x01  # {text}
    BG_IN = 0x07  # BG_BGM{id}_FIN
    BG_OUT = 0x08  # BG_BGM{id}_FOUT
    SE = 0x0A  # SE_{id}
    EF_B = 0x13  # EF_B{id}_{file}
    EF_C = 0x14  # EF_C{id}_{file}
    EF_WAIT = 0x1D  # EF_WAIT_{delay}
    EF_FLAG = 0x21  # EF_FLAG_{id}_{value}
    EF_SKIP = 0x24  # EF_SKIP
    BG_CV = 0x29  # BGCV_{OFF|id}


@dataclass
class Record:
    """One fixed-layout entry of a section file.

    Only ``line_offset`` and ``line_count`` mean anything to the converter,
    the other fields round-trip untouched.
    """

    type_tag: int
    field_04: int = 0
    field_08: int = 0
    field_0c: int = 0
    line_offset: int = 0
    line_count: int = 0
    field_18: int = 0
    field_1c: int = 0

    @property
    def record_type(self) -> RecordType | None:
        """Known tag, or None for tags the converter does not name."""
        try:
            return RecordType(self.type_tag)
        except ValueError:
            return None

    @property
    def is_text(self) -> bool:
        return self.type_tag == RecordType.TEXT

    def as_tuple(self) -> tuple[int, ...]:
        return (
            self.type_tag,
            self.field_04,
            self.field_08,
            self.field_0c,
            self.line_offset,
            self.line_count,
            self.field_18,
            self.field_1c,
        )


@dataclass(eq=False)
class Line:
    """One row of the script text."""

    kind: LineKind
    text: str
    position: int
    command: Command | None = field(default=None, repr=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "kind" and "kind" in self.__dict__:
            raise AttributeError("A line's kind is fixed once it has been parsed")
        super().__setattr__(name, value)

    def __str__(self) -> str:
        return f"({self.position}) {self.kind.value}: {self.text}"


@dataclass(eq=False)
class Section:
    """One scene's record array and the commands parsed against it."""

    path: Path
    records: list[Record]
    scene_id: str = ""
    commands: list[Command] = field(default_factory=list, repr=False)

    @property
    def name(self) -> str:
        return self.scene_id or self.path.stem


@dataclass(eq=False)
class Command:
    """An instruction slot of a section, paired 1:1 with a record."""

    section: Section = field(repr=False)
    index: int
    source_line: Line | None = field(default=None, repr=False)

    is_text = False

    @property
    def record(self) -> Record:
        """The section record at this command's index."""
        return self.section.records[self.index]

    def attach_source(self, line: Line) -> None:
        self.source_line = line
        line.command = self


@dataclass(eq=False)
class TextCommand(Command):
    """A command that shows dialogue, optionally with a speaker name."""

    name_line: Line | None = field(default=None, repr=False)
    continuation_lines: list[Line] = field(default_factory=list, repr=False)

    is_text = True

    def add_continuation(self, line: Line) -> None:
        self.continuation_lines.append(line)
        line.command = self

    @property
    def line_span(self) -> int:
        """Number of script lines holding the dialogue itself."""
        return 1 + len(self.continuation_lines)

    @property
    def expected_line_count(self) -> int:
        """Value the record's line count must hold for this command."""
        return self.line_span + (1 if self.name_line is not None else 0)

    @property
    def first_line(self) -> Line:
        """The line the record's line offset points at."""
        if self.name_line is not None:
            return self.name_line
        assert self.source_line is not None
        return self.source_line

    def text_lines(self) -> list[Line]:
        assert self.source_line is not None
        return [self.source_line, *self.continuation_lines]


@dataclass
class TranslationTables:
    """Text lifted out of a document while it is externalized."""

    lines: dict[int, str] = field(default_factory=dict)
    speakers: dict[int, str] = field(default_factory=dict)
    names: dict[int, str] = field(default_factory=dict)


@dataclass(eq=False)
class Document:
    """A whole parsed script."""

    lines: list[Line] = field(default_factory=list)
    commands: list[Command] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)
    tables: TranslationTables | None = None
    source_path: Path | None = None

    @property
    def is_externalized(self) -> bool:
        return self.tables is not None

    def text_commands(self) -> Iterator[TextCommand]:
        for command in self.commands:
            if isinstance(command, TextCommand):
                yield command

    def raw_lines(self) -> list[str]:
        return [line.text for line in self.lines]
