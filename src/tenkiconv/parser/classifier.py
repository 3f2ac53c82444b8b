"""Line classification for scene scripts."""

from __future__ import annotations

import re

from tenkiconv.parser.models import NAME_PLACEHOLDER_PREFIX, LineKind

SECTION_PREFIX = "***"
COMMENT_MARKER = "//"

# "***SS_a01_02_..." or "***SC_a01_02_..."
SECTION_PATTERN = re.compile(r"^\*\*\*S[SC]_(?P<scene>\w\d+_\d+)_")

# Display name followed by a four digit full-width id, e.g. "綾乃（０１２３）"
SPEAKER_PATTERN = re.compile(
    r"^(?P<name>.*?)\s*（(?P<id>[０-９]{4})）"
)


def classify(text: str) -> LineKind:
    """Classify one raw line of script text.

    Args:
        text: The line without its terminator

    Returns:
        The kind of the line; continuation lines are only recognised by the
        parser, so this never returns TEXT_CONTINUATION.
    """
    if text.startswith(SECTION_PREFIX):
        return LineKind.SECTION_HEADER

    if not text.strip() or text.lstrip().startswith(COMMENT_MARKER):
        return LineKind.NONE

    if "_" in text or COMMENT_MARKER in text:
        return LineKind.COMMAND

    if text.startswith(NAME_PLACEHOLDER_PREFIX) or SPEAKER_PATTERN.match(text):
        return LineKind.SPEAKER

    return LineKind.TEXT
