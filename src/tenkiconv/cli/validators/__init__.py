"""Validators for CLI input."""

from tenkiconv.cli.validators.base import ValidationError, Validator
from tenkiconv.cli.validators.file_validator import (
    ConfigFileValidator,
    FileValidator,
    ScriptFileValidator,
)

__all__ = [
    "ConfigFileValidator",
    "FileValidator",
    "ScriptFileValidator",
    "ValidationError",
    "Validator",
]
