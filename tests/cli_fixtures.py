"""CLI test fixtures that strip ANSI codes from command output."""

import json
import re
from typing import Any

import pytest
from typer.testing import CliRunner, Result

from tenkiconv.cli.main import app


def strip_ansi_codes(text: str) -> str:
    """Strip ANSI escape sequences and box drawing characters from text.

    Args:
        text: Text potentially containing ANSI escape codes

    Returns:
        Text with all ANSI escape sequences removed
    """
    ansi_escape = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
    text = ansi_escape.sub("", text)

    ansi_windows = re.compile(r"\x1b\].*?\x07")
    text = ansi_windows.sub("", text)

    unicode_special = re.compile(r"[━─┃│┏┓┗┛┡┩╇┠┨┳┻╋╭╮╰╯├┤┬┴┼]")
    return unicode_special.sub("", text)


class CleanResult:
    """A wrapper around CliRunner Result that automatically strips ANSI codes."""

    def __init__(self, result: Result):
        """Initialize with a CliRunner result."""
        self._result = result
        self._clean_output: str | None = None
        self._clean_stdout: str | None = None

    @property
    def exit_code(self) -> int:
        return self._result.exit_code

    @property
    def exception(self) -> BaseException | None:
        return self._result.exception

    @property
    def output(self) -> str:
        """Return the cleaned output."""
        if self._clean_output is None:
            self._clean_output = strip_ansi_codes(self._result.output)
        return self._clean_output

    @property
    def stdout(self) -> str:
        """Return the cleaned stdout."""
        if self._clean_stdout is None:
            self._clean_stdout = strip_ansi_codes(self._result.stdout)
        return self._clean_stdout

    def __contains__(self, text: str) -> bool:
        return text in self.output

    def assert_success(self, message: str = "") -> "CleanResult":
        """Assert that the command succeeded (exit code 0)."""
        assert self.exit_code == 0, (
            f"Command failed with exit code {self.exit_code}. "
            f"{message}\nOutput: {self.output}"
        )
        return self

    def assert_failure(
        self, exit_code: int | None = None, message: str = ""
    ) -> "CleanResult":
        """Assert that the command failed."""
        assert self.exit_code != 0, (
            f"Command succeeded unexpectedly. {message}\nOutput: {self.output}"
        )
        if exit_code is not None:
            assert self.exit_code == exit_code, (
                f"Expected exit code {exit_code}, got {self.exit_code}. "
                f"{message}\nOutput: {self.output}"
            )
        return self

    def assert_contains(self, *texts: str) -> "CleanResult":
        """Assert that all texts are in the output."""
        for text in texts:
            assert text in self.output, (
                f"Expected '{text}' in output, but not found.\nOutput: {self.output}"
            )
        return self

    def parse_json(self) -> dict[str, Any] | list[Any]:
        """Parse stdout as JSON."""
        try:
            return json.loads(self.stdout)
        except json.JSONDecodeError as e:
            raise AssertionError(
                f"Failed to parse output as JSON: {e}\nOutput: {self.stdout}"
            ) from e


class CleanCliRunner(CliRunner):
    """A CliRunner that automatically returns CleanResult objects."""

    def invoke(self, *args, **kwargs) -> CleanResult:
        """Invoke a CLI command and return a CleanResult."""
        result = super().invoke(*args, **kwargs)
        return CleanResult(result)


@pytest.fixture
def clean_runner():
    """Create a CLI runner that automatically strips ANSI codes from output."""
    return CleanCliRunner()


@pytest.fixture
def cli_invoke(clean_runner, monkeypatch):
    """Invoke the tenkiconv app with a wide console and clean output.

    Returns a function that takes command arguments and returns a CleanResult.
    """
    import importlib

    from rich.console import Console

    main_module = importlib.import_module("tenkiconv.cli.main")
    from tenkiconv.cli.commands import check as check_module
    from tenkiconv.cli.commands import convert as convert_module
    from tenkiconv.cli.utils import error_handler as error_module

    # Long temporary paths must not be wrapped by the console
    for module in (main_module, check_module, convert_module, error_module):
        monkeypatch.setattr(module, "console", Console(width=240))

    def invoke(*args, **kwargs) -> CleanResult:
        return clean_runner.invoke(app, [str(arg) for arg in args], **kwargs)

    return invoke


__all__ = [
    "CleanCliRunner",
    "CleanResult",
    "clean_runner",
    "cli_invoke",
    "strip_ansi_codes",
]
