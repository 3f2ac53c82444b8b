"""JSON output formatter for CLI."""

from __future__ import annotations

import json
from typing import Any

from tenkiconv.cli.formatters.base import OutputFormat, OutputFormatter
from tenkiconv.exceptions import TenkiConvError


class JsonFormatter(OutputFormatter[Any]):
    """Generic JSON formatter for CLI output."""

    def format(self, data: Any, format_type: OutputFormat = OutputFormat.JSON) -> str:  # noqa: ARG002
        """Format data as JSON.

        Args:
            data: Data to format
            format_type: Output format type (ignored, always JSON)

        Returns:
            JSON string
        """
        if hasattr(data, "to_dict"):
            data = data.to_dict()
        if isinstance(data, dict | list | tuple):
            return json.dumps(data, default=str, indent=2, ensure_ascii=False)
        return json.dumps({"value": data}, default=str, indent=2, ensure_ascii=False)

    def format_error_response(self, error: str | Exception, code: int = 1) -> str:
        """Format an error response.

        Args:
            error: Error message or exception
            code: Exit code

        Returns:
            JSON string
        """
        response: dict[str, Any] = {"success": False, "code": code}
        if isinstance(error, TenkiConvError):
            response["error"] = error.message
            response["hint"] = error.hint
            response["error_type"] = type(error).__name__
        else:
            response["error"] = str(error)
        return json.dumps(response, default=str, indent=2, ensure_ascii=False)
