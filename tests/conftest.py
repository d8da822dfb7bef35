"""
Pytest configuration and fixtures for kvwatch tests.

This module provides common fixtures used across unit tests.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Generator
from unittest.mock import MagicMock

import pytest

from kvwatch.config import CredentialBundle, EffectiveConfig, NotifyChannel
from kvwatch.models import ClassifiedMessage, SecretRecord, Severity


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_kvwatch_logger() -> Generator[None, None, None]:
    """Drop handlers installed by configure_logging between tests."""
    yield
    kvwatch_logger = logging.getLogger("kvwatch")
    kvwatch_logger.handlers.clear()
    kvwatch_logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove host inputs and credentials the test host may have set."""
    for name in (
        "INPUT_VAULT",
        "INPUT_NOTIFY-VIA",
        "INPUT_TO",
        "INPUT_IGNORE-TAGS",
        "INPUT_DEBUG",
        "AZURE_CLIENT_ID",
        "AZURE_CLIENT_SECRET",
        "AZURE_TENANT_ID",
        "MAILSERVER_USER",
        "MAILSERVER_PASSWORD",
        "MAILSERVER_HOST",
        "MAILSERVER_PORT",
        "SLACK_WEBHOOK_URL",
        "GITHUB_ACTIONS",
        "KVWATCH_LOG_LEVEL",
        "KVWATCH_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def now() -> datetime:
    """Return the fixed reference instant used by tests."""
    return NOW


@pytest.fixture
def healthy_secret() -> SecretRecord:
    """Return a secret expiring well outside the warning window."""
    return SecretRecord(
        name="healthy-secret",
        created_on=NOW - timedelta(days=30),
        expires_on=NOW + timedelta(days=200),
    )


@pytest.fixture
def expiring_secret() -> SecretRecord:
    """Return a secret expiring within the warning window."""
    return SecretRecord(
        name="api-key",
        created_on=NOW - timedelta(days=300),
        expires_on=NOW + timedelta(days=10),
    )


@pytest.fixture
def expired_secret() -> SecretRecord:
    """Return a secret that has already expired."""
    return SecretRecord(
        name="old-cert",
        created_on=NOW - timedelta(days=400),
        expires_on=NOW - timedelta(days=5),
    )


@pytest.fixture
def ignored_secret() -> SecretRecord:
    """Return an expired secret carrying an ignore tag."""
    return SecretRecord(
        name="legacy-token",
        created_on=NOW - timedelta(days=400),
        expires_on=NOW - timedelta(days=5),
        tags={"ignore": "true"},
    )


@pytest.fixture
def sample_messages() -> list[ClassifiedMessage]:
    """Return messages with severities [1, 0, 3, 0] in arrival order."""
    return [
        ClassifiedMessage(Severity.WARNING, "a expires in less than 30 days (x)", "a"),
        ClassifiedMessage(Severity.CRITICAL, "b expired at y", "b"),
        ClassifiedMessage(Severity.INFO, "c has no expiry date set, assuming createdDate + 1 year", "c"),
        ClassifiedMessage(Severity.CRITICAL, "d expired at z", "d"),
    ]


@pytest.fixture
def console_config() -> EffectiveConfig:
    """Return a console configuration."""
    return EffectiveConfig(vault_name="my-vault", ignore_tags=frozenset({"ignore"}))


@pytest.fixture
def email_config() -> EffectiveConfig:
    """Return an email configuration."""
    return EffectiveConfig(
        vault_name="my-vault",
        notify_channel=NotifyChannel.EMAIL,
        recipients=("ops@example.com", "sec@example.com"),
    )


@pytest.fixture
def slack_config() -> EffectiveConfig:
    """Return a Slack configuration."""
    return EffectiveConfig(
        vault_name="my-vault",
        notify_channel=NotifyChannel.CHAT,
        recipients=("#alerts",),
    )


@pytest.fixture
def full_credentials() -> CredentialBundle:
    """Return a credential bundle with every value set."""
    return CredentialBundle(
        azure_client_id="client-id",
        azure_client_secret="client-secret",
        azure_tenant_id="tenant-id",
        mail_user="mailer",
        mail_password="hunter2",
        slack_webhook_url="https://hooks.slack.com/services/T/B/X",
    )


def make_azure_secret(
    name: str,
    created_on: datetime | None,
    expires_on: datetime | None = None,
    tags: dict[str, str] | None = None,
) -> MagicMock:
    """Build a mock KeyVaultSecret."""
    secret = MagicMock()
    secret.name = name
    secret.properties.name = name
    secret.properties.created_on = created_on
    secret.properties.expires_on = expires_on
    secret.properties.tags = tags
    return secret


@pytest.fixture
def mock_secret_client() -> MagicMock:
    """Return a mocked SecretClient serving three secrets."""
    secrets = [
        make_azure_secret("healthy", NOW - timedelta(days=10), NOW + timedelta(days=100)),
        make_azure_secret("expired", NOW - timedelta(days=400), NOW - timedelta(days=1)),
        make_azure_secret("skipped", NOW - timedelta(days=400), None, {"ignore": "yes"}),
    ]
    by_name = {s.name: s for s in secrets}

    client = MagicMock()
    client.list_properties_of_secrets.return_value = iter(
        [s.properties for s in secrets]
    )
    client.get_secret.side_effect = lambda name: by_name[name]
    return client


@pytest.fixture
def azure_secret_factory():
    """Return the mock KeyVaultSecret builder."""
    return make_azure_secret
