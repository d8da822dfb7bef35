"""
Logging configuration for kvwatch.

Provides human-readable, JSON and GitHub Actions annotation output for
the ``kvwatch`` logger hierarchy.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

_RESERVED_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    )
)


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs structured JSON logs.

    Useful when CI logs are shipped to a log aggregation system.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        extra_fields: dict[str, Any] | None = None,
    ):
        """
        Initialize structured formatter.

        Args:
            include_timestamp: Include timestamp in output
            extra_fields: Additional fields to include in every log
        """
        super().__init__()
        self.include_timestamp = include_timestamp
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {}

        if self.include_timestamp:
            log_data["timestamp"] = datetime.now(timezone.utc).isoformat()

        log_data["level"] = record.levelname.lower()
        log_data["logger"] = record.name
        log_data["message"] = record.getMessage()

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        log_data.update(self.extra_fields)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Formatter that outputs human-readable logs.

    Useful for local development and CLI usage.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(
        self,
        use_colors: bool = True,
        include_timestamp: bool = False,
        stream: TextIO | None = None,
    ):
        """
        Initialize human-readable formatter.

        Args:
            use_colors: Use ANSI colors when the stream is a terminal
            include_timestamp: Include timestamp in output
            stream: Stream the handler writes to (default: sys.stderr)
        """
        super().__init__()
        stream = stream if stream is not None else sys.stderr
        self.use_colors = use_colors and stream.isatty()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as human-readable text."""
        parts = []

        if self.include_timestamp:
            timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
            parts.append(f"[{timestamp}]")

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level = f"{self.COLORS[level]}{level}{self.RESET}"
        parts.append(f"{level}:")
        parts.append(record.getMessage())

        output = " ".join(parts)

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output


class GitHubActionsFormatter(logging.Formatter):
    """
    Formatter that emits GitHub Actions workflow commands.

    Errors become ``::error::`` annotations, which mark the step as
    failed in the workflow summary.
    """

    COMMANDS = {
        "DEBUG": "debug",
        "WARNING": "warning",
        "ERROR": "error",
        "CRITICAL": "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a workflow command."""
        message = record.getMessage()
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        command = self.COMMANDS.get(record.levelname)
        if command is None:
            return message
        return f"::{command}::{self.escape(message)}"

    @staticmethod
    def escape(message: str) -> str:
        """Escape a message for use in a workflow command."""
        return (
            message.replace("%", "%25")
            .replace("\r", "%0D")
            .replace("\n", "%0A")
        )


def running_in_github_actions(environ: dict[str, str] | None = None) -> bool:
    """Check if running as a GitHub Actions step."""
    env = os.environ if environ is None else environ
    return env.get("GITHUB_ACTIONS", "").lower() == "true"


def configure_logging(
    level: str | None = None,
    format: str | None = None,
    stream: TextIO | None = None,
    extra_fields: dict[str, Any] | None = None,
) -> logging.Logger:
    """
    Configure logging for kvwatch.

    Args:
        level: Log level (default: KVWATCH_LOG_LEVEL or INFO)
        format: Output format, human or json (default: KVWATCH_LOG_FORMAT or human)
        stream: Output stream (default: sys.stderr)
        extra_fields: Extra fields to include in structured logs

    Returns:
        The configured ``kvwatch`` logger
    """
    level = level or os.getenv("KVWATCH_LOG_LEVEL", "INFO")
    format = format or os.getenv("KVWATCH_LOG_FORMAT", "human")
    stream = stream if stream is not None else sys.stderr

    root_logger = logging.getLogger("kvwatch")
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream)

    formatter: logging.Formatter
    if format == "json":
        formatter = StructuredFormatter(extra_fields=extra_fields)
    elif running_in_github_actions():
        formatter = GitHubActionsFormatter()
    else:
        formatter = HumanReadableFormatter(stream=stream)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    return root_logger
