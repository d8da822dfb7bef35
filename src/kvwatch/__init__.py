"""
kvwatch - Azure Key Vault secret expiry checker

Lists the secrets of a key vault, classifies each one by expiry status
and notifies an operator on the console, by email or via Slack. Meant
for scheduled, single-pass runs such as a CI job.

Quick Start:
    >>> from kvwatch.config import CredentialBundle, resolve_config
    >>> from kvwatch.runner import run_check
    >>>
    >>> config = resolve_config(vault="my-vault")
    >>> result = run_check(config, CredentialBundle.from_env())
    >>> print(result.outcome)
"""

from __future__ import annotations

__version__ = "0.1.0"

from kvwatch.errors import (
    ConfigError,
    CredentialError,
    DeliveryError,
    KvwatchError,
    VaultAccessError,
)
from kvwatch.models import ClassifiedMessage, SecretRecord, Severity

__all__ = [
    "__version__",
    # Errors
    "ConfigError",
    "CredentialError",
    "DeliveryError",
    "KvwatchError",
    "VaultAccessError",
    # Models
    "ClassifiedMessage",
    "SecretRecord",
    "Severity",
]
