"""
Alerting for kvwatch.

Delivers the expiry report to the console, by email or to a Slack
channel.
"""

from kvwatch.alerting.destinations import (
    BaseDestination,
    ConsoleDestination,
    DeliveryResult,
    EmailDestination,
    SlackDestination,
    create_destination,
)

__all__ = [
    "BaseDestination",
    "ConsoleDestination",
    "DeliveryResult",
    "EmailDestination",
    "SlackDestination",
    "create_destination",
]
