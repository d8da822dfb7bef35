"""
Report destinations for kvwatch.

Exactly one destination is selected per run from the configured
notification channel.
"""

from kvwatch.alerting.destinations.base import BaseDestination, DeliveryResult
from kvwatch.alerting.destinations.console import ConsoleDestination
from kvwatch.alerting.destinations.email import EmailDestination
from kvwatch.alerting.destinations.slack import SlackDestination
from kvwatch.config import CredentialBundle, EffectiveConfig, NotifyChannel

__all__ = [
    # Base
    "BaseDestination",
    "DeliveryResult",
    # Destinations
    "ConsoleDestination",
    "EmailDestination",
    "SlackDestination",
    "create_destination",
]


def create_destination(
    config: EffectiveConfig,
    credentials: CredentialBundle,
) -> BaseDestination:
    """
    Create the destination for the configured channel.

    Args:
        config: Resolved configuration
        credentials: Credentials read from the environment

    Returns:
        Configured destination instance

    Raises:
        ConfigError: If a required channel argument is missing
        CredentialError: If required channel credentials are missing
    """
    if config.notify_channel is NotifyChannel.EMAIL:
        return EmailDestination.from_config(config, credentials)
    if config.notify_channel is NotifyChannel.CHAT:
        return SlackDestination.from_config(config, credentials)
    return ConsoleDestination()
