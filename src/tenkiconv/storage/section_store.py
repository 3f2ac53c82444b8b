"""Loading and encoding of per-scene section record files."""

from __future__ import annotations

import struct
from pathlib import Path

from tenkiconv.config import get_logger
from tenkiconv.exceptions import MissingCompanionFileError, SectionFormatError
from tenkiconv.parser.models import Record, Section

logger = get_logger(__name__)

COUNT_STRUCT = struct.Struct("<i")
RECORD_STRUCT = struct.Struct("<8i")


def decode_records(data: bytes, source: Path | str = "<memory>") -> list[Record]:
    """Decode a section file into its records.

    Args:
        data: Raw file content
        source: Name used in error messages

    Returns:
        Records in file order

    Raises:
        SectionFormatError: If the size does not match the stored count
    """
    if len(data) < COUNT_STRUCT.size:
        raise SectionFormatError(
            message=f"Section file is too short to hold a record count: {source}",
            details={"file": str(source), "size": len(data)},
        )

    (count,) = COUNT_STRUCT.unpack_from(data, 0)
    expected = COUNT_STRUCT.size + count * RECORD_STRUCT.size
    if count < 0 or len(data) != expected:
        raise SectionFormatError(
            message=f"Section file size does not match its record count: {source}",
            hint="The file may be truncated or not a section file at all.",
            details={
                "file": str(source),
                "record_count": count,
                "expected_size": expected,
                "actual_size": len(data),
            },
        )

    return [
        Record(*values)
        for values in RECORD_STRUCT.iter_unpack(data[COUNT_STRUCT.size :])
    ]


def encode_records(records: list[Record], source: Path | str = "<memory>") -> bytes:
    """Encode records into the section file layout.

    Raises:
        SectionFormatError: If a field no longer fits a signed 32-bit integer
    """
    chunks = [COUNT_STRUCT.pack(len(records))]
    for index, record in enumerate(records):
        try:
            chunks.append(RECORD_STRUCT.pack(*record.as_tuple()))
        except struct.error as e:
            raise SectionFormatError(
                message=f"Record {index} cannot be encoded: {source}",
                details={
                    "file": str(source),
                    "record": record.as_tuple(),
                    "error": str(e),
                },
            ) from e
    return b"".join(chunks)


class SectionStore:
    """Section files of one script bundle.

    A store belongs to exactly one conversion run; every section it opens is
    remembered so the run can encode them back together. Writing is left to
    the caller, which commits the script and its sections in one step.
    """

    def __init__(self, directory: Path, extension: str = ".spt") -> None:
        """Initialize the store.

        Args:
            directory: Directory holding the section files
            extension: Section file extension, including the dot
        """
        self.directory = Path(directory)
        self.extension = extension
        self.sections: list[Section] = []

    def path_for(self, scene_id: str) -> Path:
        return self.directory / f"{scene_id}{self.extension}"

    def open_scene(self, scene_id: str) -> Section:
        """Load the section file for a scene id taken from a header line.

        Raises:
            MissingCompanionFileError: If the section file does not exist
        """
        path = self.path_for(scene_id)
        if not path.is_file():
            raise MissingCompanionFileError(
                message=f"Missing section file for scene {scene_id}",
                hint=f"Place {path.name} next to the script file.",
                details={"scene": scene_id, "expected_path": str(path)},
            )

        section = Section(
            path=path,
            records=decode_records(path.read_bytes(), path),
            scene_id=scene_id,
        )
        self.sections.append(section)
        logger.debug("Loaded section", path=str(path), records=len(section.records))
        return section

    def encode_all(self) -> list[tuple[Path, bytes]]:
        """Encode every opened section; nothing is written."""
        return [
            (section.path, encode_records(section.records, section.path))
            for section in self.sections
        ]
