"""
Email destination for kvwatch.

Sends the report as a single message via SMTP, with a plain text body
and an HTML alternative.
"""

from __future__ import annotations

import html
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Sequence

from kvwatch.alerting.destinations.base import BaseDestination, DeliveryResult
from kvwatch.config import CredentialBundle, EffectiveConfig, SmtpSettings
from kvwatch.errors import ConfigError, CredentialError, DeliveryError
from kvwatch.reporting import Report

logger = logging.getLogger(__name__)


class EmailDestination(BaseDestination):
    """
    SMTP-based report destination.

    The relay is verified at startup so that a broken transport fails
    the run before the vault is read.
    """

    def __init__(
        self,
        recipients: Sequence[str],
        smtp_user: str,
        smtp_password: str,
        settings: SmtpSettings | None = None,
        name: str = "email",
    ) -> None:
        """
        Initialize email destination.

        Args:
            recipients: Mail recipients (at least one)
            smtp_user: Mail relay user
            smtp_password: Mail relay password
            settings: Relay host, port, sender and subject
            name: Destination name
        """
        super().__init__(name)
        if not recipients:
            raise ConfigError(
                'When setting notifyBy to email, the argument "to" is required.'
            )
        self._recipients = list(recipients)
        self._smtp_user = smtp_user
        self._smtp_password = smtp_password
        self._settings = settings or SmtpSettings()

    @classmethod
    def from_config(
        cls, config: EffectiveConfig, credentials: CredentialBundle
    ) -> EmailDestination:
        """
        Create from resolved configuration.

        MAILSERVER_HOST and MAILSERVER_PORT override the configured relay.

        Raises:
            ConfigError: If no recipient is configured
            CredentialError: If mail relay credentials are missing
        """
        if not config.recipients:
            raise ConfigError(
                'When setting notifyBy to email, the argument "to" is required.'
            )
        if not credentials.mail_password:
            raise CredentialError(
                "Missing password for mail-relay. "
                "Please set MAILSERVER_PASSWORD in your environment"
            )
        if not credentials.mail_user:
            raise CredentialError(
                "Missing user for mail-relay. "
                "Please set MAILSERVER_USER in your environment"
            )

        settings = config.smtp
        overrides = {}
        if credentials.mail_host:
            overrides["host"] = credentials.mail_host
        if credentials.mail_port:
            try:
                overrides["port"] = int(credentials.mail_port)
            except ValueError:
                raise ConfigError(
                    f"Invalid MAILSERVER_PORT: {credentials.mail_port}"
                ) from None
        if overrides:
            settings = SmtpSettings.from_dict({**settings.to_dict(), **overrides})

        return cls(
            recipients=config.recipients,
            smtp_user=credentials.mail_user,
            smtp_password=credentials.mail_password,
            settings=settings,
        )

    @property
    def recipients(self) -> list[str]:
        """Get the mail recipients."""
        return list(self._recipients)

    @property
    def settings(self) -> SmtpSettings:
        """Get relay settings."""
        return self._settings

    def verify(self) -> None:
        """Connect and authenticate against the relay."""
        try:
            with self._connect():
                pass
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"Transporter not working: {e}") from e
        logger.info("Transporter OK")

    def deliver(self, report: Report) -> DeliveryResult:
        """Send the report as one email."""
        msg = self.build_message(report)
        try:
            with self._connect() as server:
                refused = server.sendmail(
                    self._settings.from_address,
                    self._recipients,
                    msg.as_string(),
                )
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"Failed to send mail: {e}") from e

        if refused:
            logger.warning(f"Mail refused for recipients: {', '.join(refused)}")
        logger.info(f"Mail sent to {', '.join(self._recipients)}")
        return DeliveryResult(
            destination=self.name,
            delivered=len(report),
            detail=f"refused={sorted(refused)}" if refused else "",
        )

    def build_message(self, report: Report) -> MIMEMultipart:
        """Build the multipart email for a report."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = self._settings.subject
        msg["From"] = self._settings.from_address
        msg["To"] = ", ".join(self._recipients)

        msg.attach(MIMEText(report.text(), "plain"))
        msg.attach(MIMEText(self.build_html_body(report), "html"))
        return msg

    def build_html_body(self, report: Report) -> str:
        """Render the report as an HTML list colored by severity."""
        items = []
        for message in report:
            color = self.get_severity_color(message.severity)
            style = f"color: {color};" if color else ""
            items.append(f'<li style="{style}">{html.escape(message.render())}</li>')
        return "<ul>\n" + "\n".join(items) + "\n</ul>"

    def _connect(self) -> smtplib.SMTP:
        """Open an authenticated SMTP connection."""
        server = smtplib.SMTP(self._settings.host, self._settings.port)
        try:
            if self._settings.use_tls:
                server.starttls(context=ssl.create_default_context())
            server.login(self._smtp_user, self._smtp_password)
        except Exception:
            server.close()
            raise
        return server
