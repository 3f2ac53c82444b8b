"""CLI command for tenkiconv check."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from tenkiconv.api.convert import ScriptConverter
from tenkiconv.cli.commands.options import load_command_settings
from tenkiconv.cli.formatters.base import OutputFormat
from tenkiconv.cli.formatters.result_formatter import ViolationFormatter
from tenkiconv.cli.utils.error_handler import handle_cli_error
from tenkiconv.cli.validators.base import ValidationError
from tenkiconv.cli.validators.file_validator import ScriptFileValidator
from tenkiconv.config import get_logger
from tenkiconv.exceptions import TenkiConvError

logger = get_logger(__name__)
console = Console()


def _check_one(converter: ScriptConverter, path: Path, strict: bool) -> dict[str, Any]:
    report: dict[str, Any] = {
        "name": path.name,
        "path": str(path),
        "valid": False,
        "violations": [],
    }
    try:
        ScriptFileValidator().validate(path)
        result = converter.check_file(path, strict=strict)
    except TenkiConvError as e:
        report.update(error=e.message, hint=e.hint, error_type=type(e).__name__)
        return report
    except (ValidationError, OSError) as e:
        report.update(error=str(e), hint=None, error_type=type(e).__name__)
        return report

    report["valid"] = result.is_valid
    report["violations"] = [v.to_dict() for v in result.violations]
    return report


def check_command(
    paths: Annotated[
        list[Path], typer.Argument(help="Scripts (.txt or .meta) to check")
    ],
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
    """Check that scripts agree with their section files.

    Nothing is modified. Exits with code 1 if any script has violations or
    cannot be read.
    """
    try:
        settings = load_command_settings(
            config, {"strict_records": True if strict else None}
        )
    except Exception as e:
        handle_cli_error(e, json_output=json_output)

    converter = ScriptConverter(settings)
    reports = [
        _check_one(converter, path, settings.strict_records) for path in paths
    ]
    logger.info(
        "Checked scripts",
        files=len(reports),
        invalid=sum(1 for r in reports if not r["valid"]),
    )

    ViolationFormatter(console).print_reports(
        reports, OutputFormat.JSON if json_output else OutputFormat.TABLE
    )

    if not all(r["valid"] for r in reports):
        raise typer.Exit(1)
