"""tenkiconv configuration settings."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tenkiconv.exceptions import ConfigurationError, check_config_keys

NEWLINES = {"crlf": "\r\n", "lf": "\n"}


class TenkiConvSettings(BaseSettings):
    """tenkiconv configuration settings.

    Settings are loaded with the following precedence (highest to lowest):
    1. CLI arguments (when provided via command flags)
       Example: tenkiconv convert --strict scene.txt

    2. Config file values (YAML, TOML, or JSON)
       Example: tenkiconv --config tenkiconv.yaml convert scene.txt
       Multiple files: Later files override earlier ones

    3. Environment variables (prefixed with TENKICONV_)
       Example: export TENKICONV_SCRIPT_ENCODING=cp932

    4. .env file (in current directory)

    5. Default values (defined in field declarations below)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENKICONV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Codec settings
    script_encoding: str = Field(
        default="cp932",
        description="Codec of .txt and .meta script files (Shift-JIS code page)",
    )
    script_newline: str = Field(
        default="crlf",
        description="Line terminator written after every script line (crlf, lf)",
        pattern="^(crlf|lf)$",
    )
    table_encoding: str = Field(
        default="utf-8",
        description="Codec used when writing the translation .csv table",
    )
    section_extension: str = Field(
        default=".spt",
        description="Extension of the per-scene binary record files",
    )

    # Pipeline settings
    strict_records: bool = Field(
        default=False,
        description=(
            "Also require record line counts and offsets to match the script "
            "right after parsing (they are always checked after internalizing)"
        ),
    )
    dry_run: bool = Field(
        default=False,
        description="Run the whole pipeline without writing any file",
    )

    # Debug settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="console",
        description="Log output format (console, json, structured)",
        pattern="^(console|json|structured)$",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        """Expand environment variables and ~ in the log file path."""
        if v is None:
            return None
        if isinstance(v, str):
            return Path(os.path.expandvars(v)).expanduser().resolve()
        if isinstance(v, Path):
            return v.resolve()
        raise ValueError(
            f"Path fields must be a string or Path, got {type(v).__name__}: {v!r}"
        )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.upper()
        raise ValueError(f"log_level must be a string, got {type(v).__name__}")

    @field_validator("log_format", "script_newline", mode="before")
    @classmethod
    def normalize_lowercase(cls, v: Any) -> str:
        """Normalize enumerated values to lowercase."""
        if isinstance(v, str):
            return v.lower()
        raise ValueError(f"Expected a string, got {type(v).__name__}")

    @field_validator("section_extension")
    @classmethod
    def normalize_extension(cls, v: str) -> str:
        """Ensure the section extension carries its leading dot."""
        v = v.strip()
        if not v:
            raise ValueError("section_extension cannot be empty")
        return v if v.startswith(".") else f".{v}"

    @field_validator("script_encoding", "table_encoding")
    @classmethod
    def check_codec(cls, v: str) -> str:
        """Reject codec names Python does not know."""
        import codecs

        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown text encoding: {v}") from e
        return v

    @property
    def newline(self) -> str:
        """Literal line terminator for script output."""
        return NEWLINES[self.script_newline]

    @classmethod
    def from_env(cls) -> TenkiConvSettings:
        """Create settings from environment variables."""
        return cls()

    @classmethod
    def from_file(cls, config_path: Path | str) -> TenkiConvSettings:
        """Load settings from a configuration file.

        Args:
            config_path: Path to configuration file (YAML, TOML, or JSON).

        Returns:
            Settings loaded from the file.

        Raises:
            ConfigurationError: If file format is not supported.
            FileNotFoundError: If config file doesn't exist.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        suffix = config_path.suffix.lower()

        if suffix in {".yml", ".yaml"}:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".toml":
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        elif suffix == ".json":
            with config_path.open(encoding="utf-8") as f:
                data = json.load(f)
        else:
            raise ConfigurationError(
                message=f"Unsupported configuration file format: {suffix}",
                hint="Use one of the supported formats: .yml, .yaml, .toml, or .json",
                details={
                    "file": str(config_path),
                    "detected_format": suffix,
                    "supported_formats": [".yml", ".yaml", ".toml", ".json"],
                },
            )

        check_config_keys(data)

        return cls(**data)

    @classmethod
    def from_multiple_sources(
        cls,
        config_files: list[Path | str] | None = None,
        cli_args: dict[str, Any] | None = None,
    ) -> TenkiConvSettings:
        """Load settings with proper precedence from multiple sources.

        Args:
            config_files: List of config files to load (later files override earlier).
            cli_args: Dictionary of CLI arguments.

        Returns:
            Merged settings from all sources.
        """
        data: dict[str, Any] = {}

        for config_file in config_files or []:
            # Only keep values the file sets explicitly so environment
            # variables still apply to everything else.
            file_settings = cls.from_file(config_file)
            data.update(file_settings.model_dump(exclude_unset=True))

        settings = cls(**data)

        if cli_args:
            cli_data = {k: v for k, v in cli_args.items() if v is not None}
            if cli_data:
                updated_data = settings.model_dump()
                updated_data.update(cli_data)
                settings = cls(**updated_data)

        return settings


# Global settings instance
_settings: TenkiConvSettings | None = None


def _get_config_paths() -> list[Path | str]:
    """Get the existing config files in priority order (later ones win)."""
    potential_paths = [
        Path.home() / ".config" / "tenkiconv" / "config.yaml",
        Path.home() / ".config" / "tenkiconv" / "config.json",
        Path.home() / ".config" / "tenkiconv" / "config.toml",
        Path.cwd() / "tenkiconv.yaml",
        Path.cwd() / "tenkiconv.json",
        Path.cwd() / "tenkiconv.toml",
    ]

    existing_paths: list[Path | str] = []
    for path in potential_paths:
        try:
            if path.is_file():
                existing_paths.append(path)
        except OSError:
            continue
    return existing_paths


def get_settings() -> TenkiConvSettings:
    """Get the global settings instance.

    Returns:
        Global TenkiConvSettings instance.
    """
    global _settings
    if _settings is None:
        config_paths = _get_config_paths()
        if config_paths:
            _settings = TenkiConvSettings.from_multiple_sources(
                config_files=config_paths
            )
        else:
            _settings = TenkiConvSettings.from_env()
    return _settings


def set_settings(settings: TenkiConvSettings) -> None:
    """Set the global settings instance.

    Args:
        settings: Settings instance to use globally.
    """
    global _settings
    _settings = settings


def clear_settings_cache() -> None:
    """Clear the global settings cache.

    This forces get_settings() to re-read from environment variables
    and configuration files on the next call.
    """
    global _settings
    _settings = None


def get_settings_for_cli(
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> TenkiConvSettings:
    """Get settings for CLI commands with consistent precedence.

    Args:
        config_file: Optional specific config file to load. If not provided,
                    uses standard config locations.
        cli_overrides: Dictionary of CLI argument overrides.
                      Only non-None values are applied.

    Returns:
        TenkiConvSettings instance with all sources merged.

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist.
    """
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        return TenkiConvSettings.from_multiple_sources(
            config_files=[config_file],
            cli_args=cli_overrides,
        )

    settings = get_settings()
    filtered = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    if filtered:
        data = settings.model_dump()
        data.update(filtered)
        settings = TenkiConvSettings(**data)
    return settings
