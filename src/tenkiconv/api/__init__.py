"""Programmatic entry points for converting scripts."""

from tenkiconv.api.convert import (
    BatchConversionResult,
    ConversionResult,
    Direction,
    ScriptConverter,
)

__all__ = [
    "BatchConversionResult",
    "ConversionResult",
    "Direction",
    "ScriptConverter",
]
