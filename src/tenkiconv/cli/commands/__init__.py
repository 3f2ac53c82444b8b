"""tenkiconv CLI commands."""

from __future__ import annotations

from tenkiconv.cli.commands.check import check_command
from tenkiconv.cli.commands.convert import convert_command

__all__ = ["check_command", "convert_command"]
