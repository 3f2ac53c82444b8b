"""Scene script parser for tenkiconv."""

from __future__ import annotations

from .classifier import classify
from .document_parser import DocumentParser, parse_lines
from .models import (
    Command,
    Document,
    Line,
    LineKind,
    Record,
    RecordType,
    Section,
    TextCommand,
    TranslationTables,
)

__all__ = [
    "Command",
    "Document",
    "DocumentParser",
    "Line",
    "LineKind",
    "Record",
    "RecordType",
    "Section",
    "TextCommand",
    "TranslationTables",
    "classify",
    "parse_lines",
]
