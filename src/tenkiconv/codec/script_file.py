"""Reading and writing of Shift-JIS script text files."""

from __future__ import annotations

import re
from pathlib import Path

from tenkiconv.exceptions import ScriptEncodingError

LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(content: str) -> list[str]:
    """Split text into lines on CRLF, LF or CR.

    A terminator at the very end does not produce an extra empty line.
    """
    if not content:
        return []
    lines = LINE_BREAK.split(content)
    if lines[-1] == "":
        lines.pop()
    return lines


def decode_script(data: bytes, encoding: str, source: Path | str) -> list[str]:
    """Decode raw script bytes into lines.

    Raises:
        ScriptEncodingError: If the bytes are not valid in ``encoding``
    """
    try:
        content = data.decode(encoding)
    except UnicodeDecodeError as e:
        raise ScriptEncodingError(
            message=f"Script is not {encoding} encoded: {source}",
            hint="Scripts must be saved as Shift-JIS (code page 932).",
            details={
                "file": str(source),
                "error": e.reason,
                "byte_position": e.start,
            },
        ) from e
    return split_lines(content)


def encode_script(
    lines: list[str], encoding: str, newline: str, target: Path | str
) -> bytes:
    """Encode lines into script bytes, terminating every line.

    Raises:
        ScriptEncodingError: If some text has no representation in ``encoding``
    """
    encoded = []
    for number, line in enumerate(lines):
        try:
            encoded.append(line.encode(encoding) + newline.encode(encoding))
        except UnicodeEncodeError as e:
            raise ScriptEncodingError(
                message=f"Line {number} cannot be written as {encoding}: {target}",
                hint="Replace characters the game's code page cannot show.",
                details={
                    "file": str(target),
                    "line": number,
                    "character": repr(line[e.start : e.end]),
                    "text": line,
                },
            ) from e
    return b"".join(encoded)


def read_script(path: Path, encoding: str = "cp932") -> list[str]:
    """Read a script file as a list of raw lines."""
    return decode_script(Path(path).read_bytes(), encoding, path)
