"""File helpers shared by the codecs and the section store."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

from tenkiconv.config import get_logger

logger = get_logger(__name__)


def atomic_write_bytes(path: Path, payload: bytes) -> None:
    """Replace ``path`` with ``payload`` without ever exposing a partial file.

    The payload goes to a temporary file in the destination directory, which
    is then renamed over the target so readers see either the old or the new
    content.

    Args:
        path: File to create or replace
        payload: Complete new file content
    """
    path = Path(path)
    temp_fd: int | None = None
    temp_path: str | None = None
    try:
        temp_fd, temp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        # fdopen takes ownership of the descriptor
        with os.fdopen(temp_fd, "wb") as f:
            temp_fd = None
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())

        Path(temp_path).replace(path)
        temp_path = None
        logger.debug("Wrote file", path=str(path), size=len(payload))
    finally:
        if temp_fd is not None:
            with contextlib.suppress(OSError):
                os.close(temp_fd)
        if temp_path is not None:
            with contextlib.suppress(OSError):
                Path(temp_path).unlink()
