"""
Classified message model for kvwatch.

Each message carries a numeric severity used as the sort key of the
report. Lower values are more urgent. The value 2 is unused and the
numbering must stay stable, since raw severities may be consumed
downstream.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class Severity(IntEnum):
    """Urgency of a classified message."""

    CRITICAL = 0
    WARNING = 1
    INFO = 3  # not actionable

    @property
    def label(self) -> str:
        """Short label printed in front of a message."""
        return _LABELS[self]

    @property
    def is_actionable(self) -> bool:
        """Check if this severity should trigger a notification."""
        return self < Severity.INFO

    @classmethod
    def from_string(cls, value: str) -> Severity:
        """
        Create Severity from its name (case-insensitive).

        Raises:
            ValueError: If value is not a valid severity
        """
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(f"Invalid severity: {value}") from None


_LABELS = {
    Severity.CRITICAL: "CRIT",
    Severity.WARNING: "WARN",
    Severity.INFO: "INFO",
}


@dataclass(frozen=True)
class ClassifiedMessage:
    """
    A single line of the expiry report.

    Attributes:
        severity: Message severity
        text: Message text without label or styling
        secret_name: Name of the secret the message is about
    """

    severity: Severity
    text: str
    secret_name: str = ""

    @property
    def is_actionable(self) -> bool:
        """Check if this message should trigger a notification."""
        return self.severity.is_actionable

    def render(self) -> str:
        """Render the message with its severity label."""
        return f"[{self.severity.label}] {self.text}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "severity": int(self.severity),
            "text": self.text,
            "secret_name": self.secret_name,
        }
