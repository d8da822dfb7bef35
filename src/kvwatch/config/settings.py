"""
Configuration resolver for kvwatch.

Merges host-provided inputs, command-line flags and an optional config
file into one immutable EffectiveConfig, and reads credentials from the
environment into a CredentialBundle.

Priority, highest first:
    1. Host inputs (GitHub Actions ``INPUT_*`` variables)
    2. Command-line flags
    3. Config file (YAML or JSON)

Ignore-tags from all sources are combined rather than replaced.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from kvwatch.errors import ConfigError

logger = logging.getLogger(__name__)

VAULT_URL_TEMPLATE = "https://{name}.vault.azure.net"

HOST_INPUT_PREFIX = "INPUT_"

_TRUTHY = {"true", "1", "yes", "on"}
_SPLIT_RE = re.compile(r"[\n,]")


class NotifyChannel(Enum):
    """Where the report is delivered."""

    CONSOLE = "console"
    EMAIL = "email"
    CHAT = "chat"

    @classmethod
    def from_string(cls, value: str | None) -> NotifyChannel:
        """
        Map a --notifyBy value to a channel.

        Blank means console; "slack" is the chat webhook.

        Raises:
            ConfigError: If value is not a known channel
        """
        value_lower = (value or "").strip().lower()
        if value_lower in ("", "console"):
            return cls.CONSOLE
        if value_lower == "email":
            return cls.EMAIL
        if value_lower in ("slack", "chat"):
            return cls.CHAT
        raise ConfigError(
            f"Unknown notification channel '{value}'. Use slack, email or leave blank"
        )


@dataclass(frozen=True)
class SmtpSettings:
    """Mail relay settings."""

    host: str = "localhost"
    port: int = 25
    use_tls: bool = False
    from_address: str = "Azure Keyvault Notifier <noreply@localhost>"
    subject: str = "[Alert] Keyvault secrets are about to expire"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "use_tls": self.use_tls,
            "from_address": self.from_address,
            "subject": self.subject,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SmtpSettings:
        """Create from dictionary."""
        defaults = cls()
        return cls(
            host=data.get("host", defaults.host),
            port=int(data.get("port", defaults.port)),
            use_tls=_as_bool(data.get("use_tls", defaults.use_tls)),
            from_address=data.get("from_address", defaults.from_address),
            subject=data.get("subject", defaults.subject),
        )


@dataclass(frozen=True)
class ChatSettings:
    """Display metadata for the chat webhook."""

    username: str = "KeyvaultAlerts"
    icon_emoji: str = ":warning:"
    title: str = "Expired keyvault secrets"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "username": self.username,
            "icon_emoji": self.icon_emoji,
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChatSettings:
        """Create from dictionary."""
        defaults = cls()
        return cls(
            username=data.get("username", defaults.username),
            icon_emoji=data.get("icon_emoji", defaults.icon_emoji),
            title=data.get("title", defaults.title),
        )


@dataclass(frozen=True)
class EffectiveConfig:
    """
    Resolved configuration for a single run.

    Attributes:
        vault_name: Key vault name (or full vault URL)
        ignore_tags: Tag keys that suppress reporting of a secret
        notify_channel: Selected delivery channel
        recipients: Mail recipients, or the chat channel as first entry
        debug: Enable debug logging
        smtp: Mail relay settings
        chat: Chat webhook display settings
    """

    vault_name: str
    ignore_tags: frozenset[str] = frozenset()
    notify_channel: NotifyChannel = NotifyChannel.CONSOLE
    recipients: tuple[str, ...] = ()
    debug: bool = False
    smtp: SmtpSettings = field(default_factory=SmtpSettings)
    chat: ChatSettings = field(default_factory=ChatSettings)

    @property
    def vault_url(self) -> str:
        """Get the vault endpoint URL."""
        if self.vault_name.startswith("https://"):
            return self.vault_name
        return VAULT_URL_TEMPLATE.format(name=self.vault_name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "vault": self.vault_name,
            "ignore_tags": sorted(self.ignore_tags),
            "notify_by": self.notify_channel.value,
            "to": list(self.recipients),
            "debug": self.debug,
            "smtp": self.smtp.to_dict(),
            "chat": self.chat.to_dict(),
        }


@dataclass(frozen=True)
class CredentialBundle:
    """
    Credentials read from the environment at startup.

    Passed explicitly to the vault client and the destination that
    need them instead of being read at point of use.
    """

    azure_client_id: str | None = None
    azure_client_secret: str | None = None
    azure_tenant_id: str | None = None
    mail_user: str | None = None
    mail_password: str | None = None
    mail_host: str | None = None
    mail_port: str | None = None
    slack_webhook_url: str | None = None

    @property
    def has_vault_credentials(self) -> bool:
        """Check if all service-principal variables are set."""
        return bool(
            self.azure_client_id
            and self.azure_client_secret
            and self.azure_tenant_id
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CredentialBundle:
        """Read credentials from the environment."""
        env = os.environ if environ is None else environ
        return cls(
            azure_client_id=env.get("AZURE_CLIENT_ID") or None,
            azure_client_secret=env.get("AZURE_CLIENT_SECRET") or None,
            azure_tenant_id=env.get("AZURE_TENANT_ID") or None,
            mail_user=env.get("MAILSERVER_USER") or None,
            mail_password=env.get("MAILSERVER_PASSWORD") or None,
            mail_host=env.get("MAILSERVER_HOST") or None,
            mail_port=env.get("MAILSERVER_PORT") or None,
            slack_webhook_url=env.get("SLACK_WEBHOOK_URL") or None,
        )


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY


def _as_list(value: Any) -> list[str]:
    """
    Normalize a delimited string or a list into a list of strings.

    Only strings are split; list items such as repeated flag values are
    kept whole.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items: Iterable[Any] = _SPLIT_RE.split(value)
    else:
        items = value
    return [str(item).strip() for item in items if str(item).strip()]


def read_host_inputs(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """
    Read host-provided inputs from the environment.

    GitHub Actions exposes an input named ``notify-via`` as
    ``INPUT_NOTIFY-VIA``. Empty values are treated as absent.

    Returns:
        Mapping of lower-case input name to value
    """
    env = os.environ if environ is None else environ
    inputs: dict[str, str] = {}
    for key, value in env.items():
        if not key.startswith(HOST_INPUT_PREFIX) or not value.strip():
            continue
        name = key[len(HOST_INPUT_PREFIX):].lower().replace("_", "-")
        inputs[name] = value.strip()
    return inputs


def load_config_file(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML or JSON config file.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        content = path.read_text()
    except OSError as e:
        raise ConfigError(f"Unable to read config file {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Unable to parse config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    logger.debug(f"Loaded config from {path}")
    return data


def resolve_config(
    vault: str | None = None,
    ignore_tags: Iterable[str] | None = None,
    notify_by: str | None = None,
    to: Iterable[str] | None = None,
    debug: bool = False,
    config_file: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> EffectiveConfig:
    """
    Build the effective configuration for a run.

    Args:
        vault: --vault flag value
        ignore_tags: --ignoreTags flag values
        notify_by: --notifyBy flag value
        to: --to flag values
        debug: --debug flag
        config_file: Optional path to a YAML/JSON config file
        environ: Environment to read host inputs from (default: os.environ)

    Returns:
        Resolved EffectiveConfig

    Raises:
        ConfigError: If no vault name is given or a value is invalid
    """
    file_data = load_config_file(config_file) if config_file else {}
    host = read_host_inputs(environ)

    vault_name = host.get("vault") or vault or file_data.get("vault")
    if not vault_name:
        raise ConfigError("No vault specified, bailing...")

    channel_value = host.get("notify-via")
    if channel_value is None:
        channel_value = notify_by if notify_by is not None else file_data.get("notify_by")
    channel = NotifyChannel.from_string(channel_value)

    recipients = (
        _as_list(host.get("to"))
        or _as_list(to)
        or _as_list(file_data.get("to"))
    )

    tags = set(_as_list(file_data.get("ignore_tags")))
    tags.update(_as_list(ignore_tags))
    tags.update(_as_list(host.get("ignore-tags")))

    debug_enabled = (
        bool(debug)
        or _as_bool(host.get("debug"))
        or _as_bool(file_data.get("debug"))
    )

    return EffectiveConfig(
        vault_name=str(vault_name).strip(),
        ignore_tags=frozenset(tags),
        notify_channel=channel,
        recipients=tuple(recipients),
        debug=debug_enabled,
        smtp=SmtpSettings.from_dict(file_data.get("smtp") or {}),
        chat=ChatSettings.from_dict(file_data.get("chat") or {}),
    )
