"""CLI command for tenkiconv convert."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from tenkiconv.api.convert import ScriptConverter
from tenkiconv.cli.commands.options import load_command_settings
from tenkiconv.cli.formatters.base import OutputFormat
from tenkiconv.cli.formatters.result_formatter import ConversionFormatter
from tenkiconv.cli.utils.error_handler import handle_cli_error
from tenkiconv.config import get_logger

logger = get_logger(__name__)
console = Console()


def convert_command(
    paths: Annotated[
        list[Path],
        typer.Argument(
            help="Scripts (.txt) to externalize, or .meta/.csv files to internalize"
        ),
    ],
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Run the whole pipeline but write nothing",
        ),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict", help="Also check section record counts and offsets"
        ),
    ] = False,
    json_output: Annotated[
        bool, typer.Option("--json", help="Output results as JSON")
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to configuration file"),
    ] = None,
) -> None:
    """Convert scripts to translation sheets and back.

    A ``name.txt`` script becomes ``name.meta`` (the script with placeholders)
    and ``name.csv`` (the text to translate). Passing ``name.meta`` or
    ``name.csv`` rebuilds ``name.txt`` from the translated sheet and rewrites
    the scene's section files to match.

    Each file is converted on its own; a failure is reported and the rest of
    the files are still converted.
    """
    try:
        settings = load_command_settings(
            config,
            {
                "dry_run": True if dry_run else None,
                "strict_records": True if strict else None,
            },
        )
    except Exception as e:
        handle_cli_error(e, json_output=json_output)

    converter = ScriptConverter(settings)
    batch = converter.convert_many(paths)

    formatter = ConversionFormatter(console)
    formatter.print_batch(
        batch,
        OutputFormat.JSON if json_output else OutputFormat.TEXT,
        dry_run=settings.dry_run,
    )

    if batch.failed:
        raise typer.Exit(1)
