"""Conversion pipeline between script bundles and translation sheets."""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from tenkiconv.codec.script_file import encode_script
from tenkiconv.codec.translation_table import TranslationTable, read_table
from tenkiconv.config import get_logger, get_settings
from tenkiconv.config.settings import TenkiConvSettings
from tenkiconv.exceptions import MissingCompanionFileError, TenkiConvError
from tenkiconv.parser.document_parser import DocumentParser
from tenkiconv.parser.models import Document
from tenkiconv.transform import externalize, internalize
from tenkiconv.utils.files import atomic_write_bytes
from tenkiconv.validators import DocumentValidator, ValidationResult

logger = get_logger(__name__)

SCRIPT_SUFFIX = ".txt"
META_SUFFIX = ".meta"
TABLE_SUFFIX = ".csv"


class Direction(str, Enum):
    """Which way a file is converted."""

    EXTERNALIZE = "externalize"
    INTERNALIZE = "internalize"


EXTENSION_DIRECTIONS = {
    SCRIPT_SUFFIX: Direction.EXTERNALIZE,
    META_SUFFIX: Direction.INTERNALIZE,
    TABLE_SUFFIX: Direction.INTERNALIZE,
}


@dataclass
class ConversionResult:
    """Outcome of converting one input path."""

    path: Path
    direction: Direction | None = None
    success: bool = False
    skipped: bool = False
    reason: str = ""
    outputs: list[Path] = field(default_factory=list)
    error: Exception | None = None
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def hint(self) -> str | None:
        return self.error.hint if isinstance(self.error, TenkiConvError) else None

    @property
    def message(self) -> str:
        if isinstance(self.error, TenkiConvError):
            return self.error.message
        return str(self.error) if self.error else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "direction": self.direction.value if self.direction else None,
            "success": self.success,
            "skipped": self.skipped,
            "reason": self.reason or None,
            "outputs": [str(p) for p in self.outputs],
            "error": self.message or None,
            "error_type": type(self.error).__name__ if self.error else None,
            "hint": self.hint,
            "stats": self.stats,
        }


@dataclass
class BatchConversionResult:
    """Results of converting several paths."""

    results: list[ConversionResult] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success and not r.skipped)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.skipped)

    @property
    def duration(self) -> float:
        return (self.end_time or time.time()) - self.start_time


class ScriptConverter:
    """Run the parse, validate, transform, validate, save pipeline per file.

    Each call works on its own document and section store; nothing is kept
    between files.
    """

    def __init__(self, settings: TenkiConvSettings | None = None) -> None:
        """Initialize the converter.

        Args:
            settings: Settings to use; defaults to the global settings
        """
        self.settings = settings or get_settings()
        self.parser = DocumentParser(
            encoding=self.settings.script_encoding,
            section_extension=self.settings.section_extension,
        )
        self.validator = DocumentValidator()

    @classmethod
    def from_config(cls) -> ScriptConverter:
        return cls(get_settings())

    @staticmethod
    def direction_for(path: Path) -> Direction | None:
        return EXTENSION_DIRECTIONS.get(Path(path).suffix.lower())

    def _validate(self, document: Document, check_records: bool) -> None:
        source = str(document.source_path) if document.source_path else None
        result = self.validator.validate(document, check_records=check_records)
        result.raise_for_violations(source)

    def _commit(self, writes: list[tuple[Path, bytes]]) -> list[Path]:
        if self.settings.dry_run:
            logger.info("Dry run, nothing written", files=[str(p) for p, _ in writes])
            return [path for path, _ in writes]
        for path, payload in writes:
            atomic_write_bytes(path, payload)
        return [path for path, _ in writes]

    def _encode_document(self, document: Document, target: Path) -> bytes:
        return encode_script(
            document.raw_lines(),
            self.settings.script_encoding,
            self.settings.newline,
            target,
        )

    def externalize_file(self, path: Path) -> ConversionResult:
        """Turn ``name.txt`` into ``name.meta`` plus the ``name.csv`` sheet.

        Raises:
            TenkiConvError: If any pipeline stage fails; nothing is written
        """
        script_path = Path(path).with_suffix(SCRIPT_SUFFIX)
        meta_path = script_path.with_suffix(META_SUFFIX)
        table_path = script_path.with_suffix(TABLE_SUFFIX)
        if not script_path.is_file():
            raise MissingCompanionFileError(
                message=f"Script file not found: {script_path}",
                details={"expected_path": str(script_path)},
            )

        document, _ = self.parser.parse_file(script_path)
        self._validate(document, check_records=self.settings.strict_records)
        externalize(document)
        self._validate(document, check_records=False)

        assert document.tables is not None
        table = TranslationTable.from_tables(document.tables)
        writes = [
            (meta_path, self._encode_document(document, meta_path)),
            (table_path, table.encode(self.settings.table_encoding)),
        ]
        outputs = self._commit(writes)

        logger.info(
            "Externalized file",
            path=str(script_path),
            lines=len(document.tables.lines),
            names=len(document.tables.names),
        )
        return ConversionResult(
            path=Path(path),
            direction=Direction.EXTERNALIZE,
            success=True,
            outputs=outputs,
            stats={
                "lines": len(document.tables.lines),
                "names": len(document.tables.names),
                "sections": len(document.sections),
            },
        )

    def internalize_file(self, path: Path) -> ConversionResult:
        """Rebuild ``name.txt`` and its section files from ``.meta`` and ``.csv``.

        Raises:
            MissingCompanionFileError: If the .meta or .csv file is absent
            TenkiConvError: If any later stage fails; nothing is written
        """
        meta_path = Path(path).with_suffix(META_SUFFIX)
        table_path = meta_path.with_suffix(TABLE_SUFFIX)
        script_path = meta_path.with_suffix(SCRIPT_SUFFIX)
        for companion in (meta_path, table_path):
            if not companion.is_file():
                raise MissingCompanionFileError(
                    message=f"Missing {companion.suffix} file for {meta_path.stem}",
                    hint="Keep the .meta and .csv files from the export together.",
                    details={"expected_path": str(companion)},
                )

        document, store = self.parser.parse_file(meta_path)
        table = read_table(table_path, self.settings.table_encoding)
        document.tables = table.to_tables()
        self._validate(document, check_records=False)
        internalize(document)
        self._validate(document, check_records=True)

        writes = [(script_path, self._encode_document(document, script_path))]
        writes.extend(store.encode_all())
        outputs = self._commit(writes)

        text_commands = sum(1 for _ in document.text_commands())
        logger.info(
            "Internalized file",
            path=str(meta_path),
            text_commands=text_commands,
            sections=len(store.sections),
        )
        return ConversionResult(
            path=Path(path),
            direction=Direction.INTERNALIZE,
            success=True,
            outputs=outputs,
            stats={
                "lines": len(document.lines),
                "text_commands": text_commands,
                "sections": len(store.sections),
            },
        )

    def convert(self, path: Path) -> ConversionResult:
        """Convert one path in the direction its extension implies.

        Failures are captured in the result rather than raised so a batch
        can carry on with the next file.
        """
        path = Path(path)
        direction = self.direction_for(path)
        if direction is None:
            logger.info("Skipping unrecognized file", path=str(path))
            return ConversionResult(
                path=path, skipped=True, reason="not a .txt, .meta or .csv file"
            )

        try:
            if direction is Direction.EXTERNALIZE:
                return self.externalize_file(path)
            return self.internalize_file(path)
        except TenkiConvError as e:
            logger.error(
                "Conversion failed",
                path=str(path),
                direction=direction.value,
                error_type=type(e).__name__,
                message=e.message,
                details=e.details,
            )
            return ConversionResult(path=path, direction=direction, error=e)
        except Exception as e:
            logger.error(
                "Unexpected error during conversion",
                path=str(path),
                direction=direction.value,
                error=str(e),
                exc_info=True,
            )
            return ConversionResult(path=path, direction=direction, error=e)

    def convert_many(self, paths: Iterable[Path]) -> BatchConversionResult:
        """Convert paths in order, internalizing each bundle at most once."""
        batch = BatchConversionResult()
        seen: set[Path] = set()
        for path in map(Path, paths):
            bundle = path.with_suffix(META_SUFFIX)
            if self.direction_for(path) is Direction.INTERNALIZE:
                if bundle in seen:
                    batch.results.append(
                        ConversionResult(
                            path=path,
                            direction=Direction.INTERNALIZE,
                            skipped=True,
                            reason=f"{bundle.stem} is already being internalized",
                        )
                    )
                    continue
                seen.add(bundle)
            batch.results.append(self.convert(path))
        batch.end_time = time.time()
        logger.info(
            "Batch finished",
            succeeded=batch.succeeded,
            failed=batch.failed,
            skipped=batch.skipped,
        )
        return batch

    def check_file(self, path: Path, strict: bool | None = None) -> ValidationResult:
        """Parse a script and report its violations without changing anything.

        Raises:
            TenkiConvError: If the script cannot be parsed at all
        """
        document, _ = self.parser.parse_file(Path(path))
        check_records = self.settings.strict_records if strict is None else strict
        return self.validator.validate(document, check_records=check_records)

