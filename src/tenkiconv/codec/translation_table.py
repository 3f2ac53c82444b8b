"""CSV translation table shared with translators.

The exported sheet groups speaker names and dialogue lines::

    ID,Speaker,Original,Translation
    ,,,
    Names,,,
    @N1,,綾乃,
    ,,,
    Lines,,,
    @L1,綾乃,おはよう,

Only rows whose ID is a placeholder key are read back; group rows, blank
rows and anything a translator adds in between are ignored.
"""

from __future__ import annotations

import codecs
import csv
import io
import re
from dataclasses import dataclass
from pathlib import Path

from tenkiconv.exceptions import TranslationTableError
from tenkiconv.parser.models import (
    LINE_PLACEHOLDER_PREFIX,
    NAME_PLACEHOLDER_PREFIX,
    TranslationTables,
)

COLUMNS = ("ID", "Speaker", "Original", "Translation")
NAMES_GROUP = "Names"
LINES_GROUP = "Lines"

KEY_PATTERN = re.compile(r"^@(?P<kind>[LN])(?P<id>\d+)$")


def parse_key(key: str) -> tuple[str, int]:
    """Split a placeholder key such as ``@L12`` into its prefix and id.

    Raises:
        TranslationTableError: If the key is not a well-formed placeholder
    """
    match = KEY_PATTERN.match(key.strip())
    if not match or int(match.group("id")) < 1:
        raise TranslationTableError(
            message=f"Invalid placeholder id in translation table: {key!r}",
            hint="IDs look like @L1 or @N1; do not edit the ID column.",
            details={"id": key},
        )
    return "@" + match.group("kind"), int(match.group("id"))


def canonical_key(key: str) -> str:
    """Spell a key the way the exporter does, so ``@L01`` and ``@L1`` match."""
    prefix, number = parse_key(key)
    return f"{prefix}{number}"


def _read_codec(encoding: str) -> str:
    # A UTF-8 sheet may carry the BOM spreadsheet tools add on save
    return "utf-8-sig" if codecs.lookup(encoding).name == "utf-8" else encoding


@dataclass
class TranslationRow:
    """One keyed row of the table."""

    key: str
    original: str = ""
    translation: str = ""
    speaker: str = ""

    @property
    def effective_text(self) -> str:
        """The translation when present, else the original text."""
        return self.translation or self.original or ""


class TranslationTable:
    """Ordered, keyed rows of a translation sheet."""

    def __init__(self) -> None:
        self._rows: dict[str, TranslationRow] = {}

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        try:
            return canonical_key(key) in self._rows
        except TranslationTableError:
            return False

    def put(
        self,
        key: str,
        original: str,
        translation: str = "",
        speaker: str = "",
    ) -> None:
        """Add or replace the row for ``key``, keeping first insertion order.

        Keys are stored in canonical form, so ``@L01`` replaces ``@L1``.
        """
        key = canonical_key(key)
        self._rows[key] = TranslationRow(key, original, translation, speaker)

    def get(self, key: str) -> tuple[str, str, str]:
        """Return ``(original, translation, speaker)`` for ``key``.

        Raises:
            KeyError: If the table has no such row
            TranslationTableError: If ``key`` is not a placeholder key
        """
        row = self._rows[canonical_key(key)]
        return row.original, row.translation, row.speaker

    def rows(self) -> list[TranslationRow]:
        return list(self._rows.values())

    @classmethod
    def from_tables(cls, tables: TranslationTables) -> TranslationTable:
        """Build the export table from externalized text."""
        table = cls()
        for name_id in sorted(tables.names):
            table.put(f"{NAME_PLACEHOLDER_PREFIX}{name_id}", tables.names[name_id])
        for line_id in sorted(tables.lines):
            table.put(
                f"{LINE_PLACEHOLDER_PREFIX}{line_id}",
                tables.lines[line_id],
                speaker=tables.speakers.get(line_id, ""),
            )
        return table

    def to_tables(self) -> TranslationTables:
        """Collect the text to inject, preferring translations over originals."""
        tables = TranslationTables()
        for row in self._rows.values():
            prefix, number = parse_key(row.key)
            if prefix == LINE_PLACEHOLDER_PREFIX:
                tables.lines[number] = row.effective_text
                tables.speakers[number] = row.speaker
            else:
                tables.names[number] = row.effective_text
        return tables

    def encode(self, encoding: str = "utf-8") -> bytes:
        """Render the table as CSV bytes."""
        output = io.StringIO(newline="")
        writer = csv.writer(output)
        blank = [""] * len(COLUMNS)

        writer.writerow(COLUMNS)
        writer.writerow(blank)
        writer.writerow([NAMES_GROUP, "", "", ""])
        for row in self._rows.values():
            if row.key.startswith(NAME_PLACEHOLDER_PREFIX):
                writer.writerow([row.key, "", row.original, row.translation])
        writer.writerow(blank)
        writer.writerow([LINES_GROUP, "", "", ""])
        for row in self._rows.values():
            if row.key.startswith(LINE_PLACEHOLDER_PREFIX):
                writer.writerow([row.key, row.speaker, row.original, row.translation])

        return output.getvalue().encode(encoding)

    @classmethod
    def decode(
        cls,
        data: bytes,
        source: Path | str = "<memory>",
        encoding: str = "utf-8",
    ) -> TranslationTable:
        """Parse CSV bytes produced by :meth:`encode` or edited by a translator.

        Args:
            data: Raw sheet bytes
            source: Where the bytes came from, for error messages
            encoding: Codec the sheet was saved in; a UTF-8 BOM is tolerated

        Raises:
            TranslationTableError: If the sheet cannot be read or has bad ids
        """
        try:
            content = data.decode(_read_codec(encoding))
        except UnicodeDecodeError as e:
            raise TranslationTableError(
                message=f"Translation table is not {encoding} encoded: {source}",
                hint=(
                    f"Save the sheet in {encoding}, or set table_encoding to the "
                    "codec your spreadsheet tool used."
                ),
                details={
                    "file": str(source),
                    "encoding": encoding,
                    "byte_position": e.start,
                },
            ) from e

        reader = csv.DictReader(io.StringIO(content, newline=""))
        if reader.fieldnames is None or "ID" not in reader.fieldnames:
            raise TranslationTableError(
                message=f"Translation table has no ID column: {source}",
                hint=f"The first row must be the header {', '.join(COLUMNS)}.",
                details={"file": str(source), "header": reader.fieldnames},
            )

        table = cls()
        try:
            for record in reader:
                key = (record.get("ID") or "").strip()
                if not key.startswith(
                    (LINE_PLACEHOLDER_PREFIX, NAME_PLACEHOLDER_PREFIX)
                ):
                    continue
                if key in table:
                    raise TranslationTableError(
                        message=f"Duplicate id in translation table: {key}",
                        hint="Each @L or @N id may appear only once.",
                        details={
                            "file": str(source),
                            "id": key,
                            "canonical_id": canonical_key(key),
                        },
                    )
                table.put(
                    key,
                    record.get("Original") or "",
                    record.get("Translation") or "",
                    record.get("Speaker") or "",
                )
        except csv.Error as e:
            raise TranslationTableError(
                message=f"Translation table is not valid CSV: {source}",
                details={
                    "file": str(source),
                    "line": reader.line_num,
                    "error": str(e),
                },
            ) from e
        return table


def read_table(path: Path, encoding: str = "utf-8") -> TranslationTable:
    """Read a translation table from disk."""
    return TranslationTable.decode(Path(path).read_bytes(), path, encoding)
