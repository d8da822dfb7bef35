"""
Base alert destination for kvwatch.

Provides abstract interface for report destinations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from kvwatch.models import Severity
from kvwatch.reporting import Report


@dataclass
class DeliveryResult:
    """
    Result of delivering a report.

    Attributes:
        destination: Name of the destination used
        delivered: Number of messages delivered
        detail: Free-form detail (e.g. SMTP response)
    """

    destination: str
    delivered: int
    detail: str = ""


class BaseDestination(ABC):
    """
    Abstract base class for report destinations.

    Exactly one destination is active per run. Implementations raise
    DeliveryError when sending fails; they never retry.
    """

    def __init__(self, name: str) -> None:
        """
        Initialize the destination.

        Args:
            name: Destination name
        """
        self._name = name

    @property
    def name(self) -> str:
        """Get destination name."""
        return self._name

    @abstractmethod
    def deliver(self, report: Report) -> DeliveryResult:
        """
        Deliver a report.

        Args:
            report: Sorted report to deliver

        Returns:
            DeliveryResult describing what was sent

        Raises:
            DeliveryError: If delivery fails
        """
        ...

    def verify(self) -> None:
        """
        Check the destination is usable before any secret is read.

        Raises:
            DeliveryError: If the destination is unreachable
        """

    def get_severity_color(self, severity: Severity) -> str:
        """
        Get CSS color for a severity.

        Args:
            severity: Severity level

        Returns:
            CSS color value, empty for default color
        """
        colors = {
            Severity.CRITICAL: "red",
            Severity.WARNING: "#99cc33",
        }
        return colors.get(severity, "")
