"""
Report aggregation for kvwatch.

Collects classified messages and orders them by severity, most urgent
first. Messages of equal severity keep their arrival order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from kvwatch.models import ClassifiedMessage, Severity


@dataclass(frozen=True)
class Report:
    """
    Ordered expiry report.

    Attributes:
        messages: Messages sorted ascending by severity
    """

    messages: tuple[ClassifiedMessage, ...] = ()

    def __iter__(self) -> Iterator[ClassifiedMessage]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)

    @property
    def has_actionable(self) -> bool:
        """Check if any message is more severe than informational."""
        return any(m.is_actionable for m in self.messages)

    def lines(self) -> list[str]:
        """Get the rendered message lines."""
        return [m.render() for m in self.messages]

    def text(self) -> str:
        """Get the report as newline-joined plain text."""
        return "\n".join(self.lines())

    def counts(self) -> dict[str, int]:
        """Count messages per severity."""
        counts = {severity.name.lower(): 0 for severity in Severity}
        for message in self.messages:
            counts[message.severity.name.lower()] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "has_actionable": self.has_actionable,
            "counts": self.counts(),
            "messages": [m.to_dict() for m in self.messages],
        }


@dataclass
class ReportBuilder:
    """Accumulates messages during a run and builds the sorted Report."""

    _messages: list[ClassifiedMessage] = field(default_factory=list)

    def add(self, messages: Iterable[ClassifiedMessage]) -> None:
        """Append messages in arrival order."""
        self._messages.extend(messages)

    def build(self) -> Report:
        """Build the report with a stable sort by severity."""
        return Report(messages=tuple(sorted(self._messages, key=lambda m: m.severity)))


def build_report(messages: Iterable[ClassifiedMessage]) -> Report:
    """Build a report from an iterable of messages."""
    builder = ReportBuilder()
    builder.add(messages)
    return builder.build()
