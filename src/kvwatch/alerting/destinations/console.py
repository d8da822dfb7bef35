"""
Console destination for kvwatch.

Prints the report to standard output, colored by severity when the
output is a terminal.
"""

from __future__ import annotations

import sys
from typing import TextIO

from kvwatch.alerting.destinations.base import BaseDestination, DeliveryResult
from kvwatch.models import ClassifiedMessage, Severity
from kvwatch.reporting import Report


class ConsoleDestination(BaseDestination):
    """Writes each report line to a text stream."""

    COLORS = {
        Severity.CRITICAL: "\033[1;31m",  # Bold red
        Severity.WARNING: "\033[33m",  # Yellow
        Severity.INFO: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(
        self,
        name: str = "console",
        stream: TextIO | None = None,
        use_colors: bool = True,
    ) -> None:
        """
        Initialize console destination.

        Args:
            name: Destination name
            stream: Output stream (default: sys.stdout)
            use_colors: Use ANSI colors when the stream is a terminal
        """
        super().__init__(name)
        self._stream = stream
        self._use_colors = use_colors

    @property
    def stream(self) -> TextIO:
        """Get the output stream."""
        return self._stream if self._stream is not None else sys.stdout

    def _colors_enabled(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        return self._use_colors and bool(isatty and isatty())

    def format_line(self, message: ClassifiedMessage) -> str:
        """Render a message, colored if enabled."""
        line = message.render()
        if self._colors_enabled():
            return f"{self.COLORS[message.severity]}{line}{self.RESET}"
        return line

    def deliver(self, report: Report) -> DeliveryResult:
        """Print the report."""
        for message in report:
            print(self.format_line(message), file=self.stream)
        self.stream.flush()
        return DeliveryResult(destination=self.name, delivered=len(report))
