"""CLI utilities."""

from tenkiconv.cli.utils.error_handler import handle_cli_error

__all__ = ["handle_cli_error"]
