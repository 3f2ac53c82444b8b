"""File formats at the edge of the converter."""

from __future__ import annotations

from .script_file import decode_script, encode_script, read_script, split_lines
from .translation_table import TranslationRow, TranslationTable, read_table

__all__ = [
    "TranslationRow",
    "TranslationTable",
    "decode_script",
    "encode_script",
    "read_script",
    "read_table",
    "split_lines",
]
