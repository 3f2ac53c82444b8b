"""Main CLI entry point."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from tenkiconv import __version__
from tenkiconv.cli.commands import check_command, convert_command
from tenkiconv.cli.formatters.json_formatter import JsonFormatter
from tenkiconv.config import configure_logging, get_logger, set_settings
from tenkiconv.config.settings import get_settings_for_cli

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="tenkiconv",
    help="Convert game scene scripts to translation sheets and back",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="convert")(convert_command)
app.command(name="check")(check_command)


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show tenkiconv version."""
    version_info = {
        "name": "tenkiconv",
        "version": __version__,
        "description": "Scene script translation converter",
    }

    if json_output:
        print(JsonFormatter().format(version_info))
    else:
        console.print(f"tenkiconv v{version_info['version']}")


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging (INFO level)"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure global options."""
    if debug:
        overrides = {"log_level": "DEBUG", "debug": True}
    elif verbose:
        overrides = {"log_level": "INFO"}
    else:
        return

    settings = get_settings_for_cli(cli_overrides=overrides)
    set_settings(settings)
    configure_logging(settings)
    if debug:
        logger.debug("Debug mode enabled")
    else:
        logger.info("Verbose mode enabled")


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
