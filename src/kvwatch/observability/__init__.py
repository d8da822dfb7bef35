"""
Observability for kvwatch.
"""

from kvwatch.observability.logging import (
    GitHubActionsFormatter,
    HumanReadableFormatter,
    StructuredFormatter,
    configure_logging,
    running_in_github_actions,
)

__all__ = [
    "GitHubActionsFormatter",
    "HumanReadableFormatter",
    "StructuredFormatter",
    "configure_logging",
    "running_in_github_actions",
]
