"""File and path validators for CLI input."""

from __future__ import annotations

from pathlib import Path

from tenkiconv.cli.validators.base import ValidationError, Validator


class FileValidator(Validator[Path]):
    """Validator for file paths."""

    def __init__(
        self,
        must_exist: bool = True,
        extensions: list[str] | None = None,
    ) -> None:
        """Initialize file validator.

        Args:
            must_exist: Whether file must exist
            extensions: Allowed file extensions (e.g., [".txt", ".meta"])
        """
        self.must_exist = must_exist
        self.extensions = extensions

    def validate(self, value: str | Path) -> Path:
        """Validate file path.

        Args:
            value: File path to validate

        Returns:
            Validated Path object

        Raises:
            ValidationError: If validation fails
        """
        path = Path(value).expanduser()

        if self.must_exist and not path.exists():
            raise ValidationError(f"File does not exist: {path}", "path")

        if path.exists() and not path.is_file():
            raise ValidationError(f"Path is not a file: {path}", "path")

        if self.extensions and path.suffix.lower() not in self.extensions:
            raise ValidationError(
                f"Invalid file extension: {path.suffix or '(none)'}. "
                f"Expected one of: {', '.join(self.extensions)}",
                "path",
            )

        return path


class ScriptFileValidator(FileValidator):
    """Validator for scripts that can be parsed and checked."""

    def __init__(self) -> None:
        super().__init__(must_exist=True, extensions=[".txt", ".meta"])


class ConfigFileValidator(FileValidator):
    """Validator specifically for configuration files."""

    def __init__(self) -> None:
        super().__init__(
            must_exist=True,
            extensions=[".yaml", ".yml", ".json", ".toml"],
        )
