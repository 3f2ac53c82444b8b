"""Structural consistency checks over a parsed document."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from tenkiconv.config import get_logger
from tenkiconv.exceptions import StructuralMismatchError
from tenkiconv.parser.models import Document, Line, LineKind, Section, TextCommand

logger = get_logger(__name__)


class ViolationKind(str, Enum):
    """Which invariant a violation breaks."""

    LINE_BACKREF = "line_backref"
    LINE_POSITION = "line_position"
    SPEAKER_ORPHAN = "speaker_orphan"
    CONTINUATION_ORPHAN = "continuation_orphan"
    NAME_LINE = "name_line"
    STRUCTURAL_MISMATCH = "structural_mismatch"
    COMMAND_INDEX = "command_index"
    LINE_COUNT = "line_count"
    LINE_OFFSET = "line_offset"


@dataclass
class Violation:
    """A single broken invariant."""

    kind: ViolationKind
    message: str
    position: int | None = None
    section: str | None = None
    index: int | None = None

    def __str__(self) -> str:
        where = []
        if self.section is not None:
            where.append(f"section {self.section}")
        if self.index is not None:
            where.append(f"command {self.index}")
        if self.position is not None:
            where.append(f"line {self.position}")
        prefix = f"[{', '.join(where)}] " if where else ""
        return f"{prefix}{self.kind.value}: {self.message}"

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "section": self.section,
            "index": self.index,
            "position": self.position,
        }


@dataclass
class ValidationResult:
    """Outcome of validating one document."""

    violations: list[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def of_kind(self, kind: ViolationKind) -> list[Violation]:
        return [v for v in self.violations if v.kind is kind]

    def raise_for_violations(self, source: str | None = None) -> None:
        """Raise if any invariant is broken.

        Raises:
            StructuralMismatchError: Listing the first violations found
        """
        if self.is_valid:
            return

        shown = self.violations[: DocumentValidator.MAX_REPORTED]
        details: dict[str, object] = {
            "violation_count": len(self.violations),
            "violations": [str(v) for v in shown],
        }
        if source:
            details["file"] = source
        raise StructuralMismatchError(
            message=f"Script structure is inconsistent: {self.violations[0]}",
            hint="The script and its section files do not describe the same scene.",
            details=details,
        )


class DocumentValidator:
    """Read-only checker for the invariants between lines, commands and records."""

    MAX_REPORTED: ClassVar[int] = 20

    def validate(
        self, document: Document, check_records: bool = False
    ) -> ValidationResult:
        """Check every invariant and collect all violations.

        Args:
            document: Document to inspect; it is never modified
            check_records: Also require record line counts and line offsets
                to agree with the script

        Returns:
            All violations found, in document order per check
        """
        result = ValidationResult()
        self._check_lines(document, result)
        claimed: dict[int, TextCommand] = {}
        for command in document.commands:
            if isinstance(command, TextCommand) and command.name_line is not None:
                self._check_name_line(command, claimed, result)
        for section in document.sections:
            self._check_section(section, result)
        self._check_commands(document, result)
        if check_records:
            self._check_records(document, result)

        if result.violations:
            logger.warning(
                "Document failed validation",
                source=str(document.source_path) if document.source_path else None,
                violations=len(result.violations),
                first=str(result.violations[0]),
            )
        return result

    def _check_lines(self, document: Document, result: ValidationResult) -> None:
        lines = document.lines
        for i, line in enumerate(lines):
            if line.position != i:
                result.violations.append(
                    Violation(
                        ViolationKind.LINE_POSITION,
                        f"line is numbered {line.position} but sits at {i}",
                        position=i,
                    )
                )

            owner = line.command
            if owner is not None:
                owned = owner.source_line is line or (
                    isinstance(owner, TextCommand)
                    and any(c is line for c in owner.continuation_lines)
                )
                if not owned:
                    result.violations.append(
                        Violation(
                            ViolationKind.LINE_BACKREF,
                            "line points at a command that does not own it",
                            position=i,
                        )
                    )

            if line.kind is LineKind.SPEAKER:
                following = lines[i + 1] if i + 1 < len(lines) else None
                if following is None or following.kind is not LineKind.TEXT:
                    result.violations.append(
                        Violation(
                            ViolationKind.SPEAKER_ORPHAN,
                            "speaker line is not followed by a text line",
                            position=i,
                        )
                    )

            elif line.kind is LineKind.TEXT_CONTINUATION:
                self._check_continuation(lines, i, line, result)

    def _check_continuation(
        self, lines: list[Line], i: int, line: Line, result: ValidationResult
    ) -> None:
        j = i - 1
        while j >= 0 and lines[j].kind is LineKind.TEXT_CONTINUATION:
            j -= 1
        head = lines[j] if j >= 0 else None
        if head is None or head.kind is not LineKind.TEXT:
            result.violations.append(
                Violation(
                    ViolationKind.CONTINUATION_ORPHAN,
                    "continuation line does not follow a text line",
                    position=i,
                )
            )
            return

        command = head.command
        offset = i - j - 1
        if (
            not isinstance(command, TextCommand)
            or offset >= len(command.continuation_lines)
            or command.continuation_lines[offset] is not line
        ):
            result.violations.append(
                Violation(
                    ViolationKind.CONTINUATION_ORPHAN,
                    f"continuation line is not entry {offset} of its text command",
                    position=i,
                )
            )

    def _check_name_line(
        self,
        command: TextCommand,
        claimed: dict[int, TextCommand],
        result: ValidationResult,
    ) -> None:
        name_line = command.name_line
        assert name_line is not None
        source = command.source_line
        if name_line.kind is not LineKind.SPEAKER:
            problem = "name line is not a speaker line"
        elif source is None or name_line.position != source.position - 1:
            problem = "name line does not directly precede its text"
        elif id(name_line) in claimed:
            problem = "speaker line is claimed by more than one text command"
        else:
            problem = None
        claimed.setdefault(id(name_line), command)

        if problem:
            result.violations.append(
                Violation(
                    ViolationKind.NAME_LINE,
                    problem,
                    position=name_line.position,
                    section=command.section.name,
                    index=command.index,
                )
            )

    def _check_section(self, section: Section, result: ValidationResult) -> None:
        commands, records = section.commands, section.records
        first_mismatch = None
        for i in range(min(len(commands), len(records))):
            if isinstance(commands[i], TextCommand) != records[i].is_text:
                first_mismatch = i
                break

        if first_mismatch is None and len(commands) != len(records):
            first_mismatch = min(len(commands), len(records))

        if first_mismatch is None:
            return

        result.violations.append(
            Violation(
                ViolationKind.STRUCTURAL_MISMATCH,
                f"{len(commands)} commands against {len(records)} records, "
                f"first mismatch at index {first_mismatch}",
                position=(
                    commands[first_mismatch].source_line.position
                    if first_mismatch < len(commands)
                    and commands[first_mismatch].source_line is not None
                    else None
                ),
                section=section.name,
                index=first_mismatch,
            )
        )

    def _check_commands(self, document: Document, result: ValidationResult) -> None:
        for command in document.commands:
            section_commands = command.section.commands
            in_place = (
                0 <= command.index < len(section_commands)
                and section_commands[command.index] is command
            )
            source = command.source_line
            if not in_place or source is None or source.command is not command:
                result.violations.append(
                    Violation(
                        ViolationKind.COMMAND_INDEX,
                        "command is not at its index or its source line "
                        "points elsewhere",
                        position=source.position if source is not None else None,
                        section=command.section.name,
                        index=command.index,
                    )
                )

    def _check_records(self, document: Document, result: ValidationResult) -> None:
        for command in document.text_commands():
            if command.index >= len(command.section.records):
                continue  # already reported as a structural mismatch
            record = command.record
            if record.line_count != command.expected_line_count:
                result.violations.append(
                    Violation(
                        ViolationKind.LINE_COUNT,
                        f"record holds {record.line_count} lines, "
                        f"script has {command.expected_line_count}",
                        position=command.first_line.position,
                        section=command.section.name,
                        index=command.index,
                    )
                )
            if record.line_offset != command.first_line.position:
                result.violations.append(
                    Violation(
                        ViolationKind.LINE_OFFSET,
                        f"record points at line {record.line_offset}, "
                        f"text starts at {command.first_line.position}",
                        position=command.first_line.position,
                        section=command.section.name,
                        index=command.index,
                    )
                )


def validate_document(
    document: Document, check_records: bool = False
) -> ValidationResult:
    """Validate a document with the default validator."""
    return DocumentValidator().validate(document, check_records=check_records)
