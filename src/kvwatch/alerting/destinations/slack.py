"""
Slack destination for kvwatch.

Posts the report to a Slack channel via an incoming webhook.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from kvwatch.alerting.destinations.base import BaseDestination, DeliveryResult
from kvwatch.config import ChatSettings, CredentialBundle, EffectiveConfig
from kvwatch.errors import ConfigError, CredentialError, DeliveryError
from kvwatch.reporting import Report

logger = logging.getLogger(__name__)


class SlackDestination(BaseDestination):
    """
    Slack webhook-based report destination.

    The whole report is sent as one plain text message, one line per
    secret message.
    """

    def __init__(
        self,
        webhook_url: str,
        channel: str,
        settings: ChatSettings | None = None,
        name: str = "slack",
        timeout: int = 30,
    ) -> None:
        """
        Initialize Slack destination.

        Args:
            webhook_url: Incoming webhook URL
            channel: Target channel
            settings: Username, icon and title shown in Slack
            name: Destination name
            timeout: Request timeout in seconds
        """
        super().__init__(name)
        self._webhook_url = webhook_url
        self._channel = channel
        self._settings = settings or ChatSettings()
        self._timeout = timeout

    @classmethod
    def from_config(
        cls, config: EffectiveConfig, credentials: CredentialBundle
    ) -> SlackDestination:
        """
        Create from resolved configuration.

        The first recipient is the target channel.

        Raises:
            CredentialError: If SLACK_WEBHOOK_URL is not set
            ConfigError: If no channel is configured
        """
        if not credentials.slack_webhook_url:
            raise CredentialError(
                "No webhook url defined. Please set SLACK_WEBHOOK_URL in your environment"
            )
        if not config.recipients:
            raise ConfigError(
                'When setting notifyBy to slack, the argument "to" is required.'
            )
        if len(config.recipients) > 1:
            logger.warning(
                f"Slack posts to a single channel; ignoring {', '.join(config.recipients[1:])}"
            )
        return cls(
            webhook_url=credentials.slack_webhook_url,
            channel=config.recipients[0],
            settings=config.chat,
        )

    @property
    def channel(self) -> str:
        """Get the target channel."""
        return self._channel

    def deliver(self, report: Report) -> DeliveryResult:
        """Post the report to Slack."""
        payload = self.build_payload(report)
        try:
            self._send_webhook(payload)
        except (urllib.error.URLError, OSError) as e:
            raise DeliveryError(f"Failed to post to Slack: {e}") from e

        logger.info("Posted messages to slack")
        return DeliveryResult(destination=self.name, delivered=len(report))

    def build_payload(self, report: Report) -> dict[str, Any]:
        """Build the webhook payload."""
        payload: dict[str, Any] = {
            "text": report.text(),
            "channel": self._channel,
            "attachments": [
                {
                    "title": self._settings.title,
                    "fallback": self._settings.title,
                }
            ],
        }
        if self._settings.username:
            payload["username"] = self._settings.username
        if self._settings.icon_emoji:
            payload["icon_emoji"] = self._settings.icon_emoji
        return payload

    def _send_webhook(self, payload: dict[str, Any]) -> None:
        """Send payload to Slack webhook."""
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(
            self._webhook_url,
            data=data,
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        with urllib.request.urlopen(request, timeout=self._timeout) as response:
            if not 200 <= response.status < 300:
                raise DeliveryError(f"Slack returned status {response.status}")
