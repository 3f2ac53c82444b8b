"""Externalize and internalize transforms over a parsed document."""

from __future__ import annotations

from .externalizer import externalize
from .internalizer import internalize, split_text
from .relayout import relayout, update_line_offsets

__all__ = [
    "externalize",
    "internalize",
    "relayout",
    "split_text",
    "update_line_offsets",
]
