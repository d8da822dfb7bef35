"""
Error taxonomy for kvwatch.

Every error raised by kvwatch derives from KvwatchError. All of them are
fatal to a run; the CLI maps each class to an exit code.
"""

from __future__ import annotations


class KvwatchError(Exception):
    """Base class for all kvwatch errors."""

    exit_code: int = 1


class ConfigError(KvwatchError):
    """Missing or invalid configuration (vault name, channel arguments)."""

    exit_code = 2


class CredentialError(KvwatchError):
    """Required environment credentials are not set."""

    exit_code = 2


class VaultAccessError(KvwatchError):
    """Listing or fetching secrets from the vault failed."""


class DeliveryError(KvwatchError):
    """Sending the report by mail or webhook failed."""
