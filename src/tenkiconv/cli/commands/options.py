"""Options shared by several commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from tenkiconv.cli.validators.file_validator import ConfigFileValidator
from tenkiconv.config import configure_logging, get_logger, get_settings_for_cli
from tenkiconv.config.settings import TenkiConvSettings

logger = get_logger(__name__)


def load_command_settings(
    config: Path | None, overrides: dict[str, Any]
) -> TenkiConvSettings:
    """Settings for one command run, with flags taking precedence.

    Logging is reconfigured from a ``--config`` file so its ``log_level``,
    ``log_format`` and ``log_file`` apply to the command.

    Raises:
        ValidationError: If the config file has an unsupported extension
        ConfigurationError: If the config file holds misspelt keys
    """
    if config is None:
        return get_settings_for_cli(cli_overrides=overrides)

    config = ConfigFileValidator().validate(config)
    settings = get_settings_for_cli(config_file=config, cli_overrides=overrides)
    configure_logging(settings)
    logger.debug("Loaded command settings", config=str(config))
    return settings
