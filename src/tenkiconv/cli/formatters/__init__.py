"""Output formatters for CLI commands."""

from tenkiconv.cli.formatters.base import OutputFormat, OutputFormatter
from tenkiconv.cli.formatters.json_formatter import JsonFormatter
from tenkiconv.cli.formatters.result_formatter import (
    ConversionFormatter,
    ViolationFormatter,
)

__all__ = [
    "ConversionFormatter",
    "JsonFormatter",
    "OutputFormat",
    "OutputFormatter",
    "ViolationFormatter",
]
