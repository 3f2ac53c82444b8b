"""Custom exception hierarchy for tenkiconv with helpful error messages."""

from __future__ import annotations

from typing import Any


class TenkiConvError(Exception):
    """Base exception with helpful formatting for all tenkiconv errors.

    Provides structured error messages with hints and details to help users
    understand and fix problems with a script bundle.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception with structured error information.

        Args:
            message: Primary error message describing what went wrong
            hint: Optional hint suggesting how to fix the problem
            details: Optional dictionary with additional debugging information
        """
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Format the error message with hint and details.

        Returns:
            Formatted error string with all available information
        """
        output = f"Error: {self.message}"
        if self.hint:
            output += f"\nHint: {self.hint}"
        if self.details:
            details_str = "\n".join(
                f"  {key}: {value}" for key, value in self.details.items()
            )
            output += f"\nDetails:\n{details_str}"
        return output


class ConfigurationError(TenkiConvError):
    """Configuration errors including invalid settings and unsupported files."""

    pass


class MalformedInputError(TenkiConvError):
    """A structural rule of the script was violated while parsing."""

    pass


class MalformedHeaderError(MalformedInputError):
    """A section header line does not carry a scene identifier."""

    pass


class MalformedSpeakerError(MalformedInputError):
    """A speaker line does not match the display-name pattern."""

    pass


class CorruptPlaceholderError(TenkiConvError):
    """A placeholder key is missing, unknown, or was edited by hand."""

    pass


class StructuralMismatchError(TenkiConvError):
    """Commands, lines and section records disagree with each other."""

    pass


class MissingCompanionFileError(TenkiConvError):
    """A file that must accompany the converted script is absent."""

    pass


class SectionFormatError(TenkiConvError):
    """A section record file is truncated or has trailing data."""

    pass


class ScriptEncodingError(TenkiConvError):
    """Script text cannot be decoded from or encoded to the script codepage."""

    pass


class TranslationTableError(TenkiConvError):
    """The translation table is unreadable or holds invalid ids."""

    pass


def check_config_keys(config: dict[str, Any]) -> None:
    """Check for common configuration mistakes.

    Args:
        config: Configuration dictionary to validate

    Raises:
        ConfigurationError: With hints about correct configuration keys
    """
    wrong_keys = {
        "encoding": "script_encoding",
        "extension": "section_extension",
        "newline": "script_newline",
    }

    for wrong, correct in wrong_keys.items():
        if wrong in config:
            raise ConfigurationError(
                message=f"Invalid configuration key '{wrong}'",
                hint=f"Use '{correct}' instead of '{wrong}'",
                details={
                    "found_keys": list(config.keys()),
                    "invalid_key": wrong,
                    "correct_key": correct,
                },
            )
