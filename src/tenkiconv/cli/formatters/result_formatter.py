"""Formatters for conversion results and validation reports."""

from __future__ import annotations

from typing import Any

from rich.markup import escape
from rich.table import Table

from tenkiconv.api.convert import BatchConversionResult, ConversionResult
from tenkiconv.cli.formatters.base import OutputFormat, OutputFormatter
from tenkiconv.cli.formatters.json_formatter import JsonFormatter

MAX_SHOWN_VIOLATIONS = 50


def _describe(result: ConversionResult) -> str:
    name = escape(result.path.name)
    if result.skipped:
        return f"[dim]- {name}: skipped ({escape(result.reason)})[/dim]"
    if result.success:
        outputs = ", ".join(escape(p.name) for p in result.outputs)
        direction = result.direction.value if result.direction else ""
        return f"[green]✓[/green] [cyan]{name}[/cyan] {direction}d → {outputs}"

    line = f"[red]✗[/red] [cyan]{name}[/cyan]: [red]{escape(result.message)}[/red]"
    if result.hint:
        line += f"\n    [yellow]→ {escape(result.hint)}[/yellow]"
    return line


class ConversionFormatter(OutputFormatter[BatchConversionResult]):
    """Per-file lines plus a summary table for a conversion batch."""

    def format(
        self,
        data: BatchConversionResult,
        format_type: OutputFormat = OutputFormat.TEXT,
    ) -> str:
        if format_type == OutputFormat.JSON:
            return JsonFormatter().format(
                {
                    "success": data.failed == 0,
                    "succeeded": data.succeeded,
                    "failed": data.failed,
                    "skipped": data.skipped,
                    "results": [r.to_dict() for r in data.results],
                }
            )
        return "\n".join(_describe(r) for r in data.results)

    def summary_table(self, data: BatchConversionResult, dry_run: bool) -> Table:
        table = Table(title="Dry Run Summary" if dry_run else "Conversion Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Count", justify="right", style="bold")
        table.add_row("Converted", str(data.succeeded))
        table.add_row("Failed", str(data.failed))
        table.add_row("Skipped", str(data.skipped))
        return table

    def print_batch(
        self,
        data: BatchConversionResult,
        format_type: OutputFormat = OutputFormat.TEXT,
        dry_run: bool = False,
    ) -> None:
        """Print the batch, adding the summary table for console output."""
        if format_type == OutputFormat.JSON:
            self.print(data, format_type)
            return

        if dry_run:
            self.console.print("[yellow]DRY RUN - no files were written[/yellow]")
        if data.results:
            self.print(data, format_type)
        self.console.print(self.summary_table(data, dry_run))


class ViolationFormatter(OutputFormatter[list[dict[str, Any]]]):
    """Validation reports of several scripts.

    Each report is a dict with ``name``, ``path``, ``valid``, ``violations``
    and, when the script could not be read at all, ``error`` and ``hint``.
    """

    def format(
        self,
        data: list[dict[str, Any]],
        format_type: OutputFormat = OutputFormat.TABLE,
    ) -> str:
        if format_type == OutputFormat.JSON:
            return JsonFormatter().format(
                {"valid": all(r["valid"] for r in data), "files": data}
            )

        lines = []
        for report in data:
            name = escape(report["name"])
            if report.get("error"):
                lines.append(f"[red]✗[/red] {name}: {escape(report['error'])}")
                if report.get("hint"):
                    lines.append(f"    [yellow]→ {escape(report['hint'])}[/yellow]")
            elif report["valid"]:
                lines.append(f"[green]✓[/green] {name}: no violations")
            else:
                count = len(report["violations"])
                noun = "violation" if count == 1 else "violations"
                lines.append(f"[red]✗[/red] {name}: {count} {noun}")
        return "\n".join(lines)

    def violation_table(self, data: list[dict[str, Any]]) -> Table | None:
        rows = [
            (report["name"], violation)
            for report in data
            for violation in report["violations"]
        ]
        if not rows:
            return None

        table = Table(title="Violations", show_lines=False)
        table.add_column("File", style="cyan")
        table.add_column("Kind", style="magenta")
        table.add_column("Section")
        table.add_column("Command", justify="right")
        table.add_column("Line", justify="right")
        table.add_column("Message")
        for name, violation in rows[:MAX_SHOWN_VIOLATIONS]:
            table.add_row(
                escape(name),
                violation["kind"],
                escape(violation["section"] or ""),
                "" if violation["index"] is None else str(violation["index"]),
                "" if violation["position"] is None else str(violation["position"]),
                escape(violation["message"]),
            )
        if len(rows) > MAX_SHOWN_VIOLATIONS:
            table.caption = f"... and {len(rows) - MAX_SHOWN_VIOLATIONS} more"
        return table

    def print_reports(
        self,
        data: list[dict[str, Any]],
        format_type: OutputFormat = OutputFormat.TABLE,
    ) -> None:
        if format_type == OutputFormat.JSON:
            self.print(data, format_type)
            return

        self.print(data, format_type)
        table = self.violation_table(data)
        if table is not None:
            self.console.print(table)
