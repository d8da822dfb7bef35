"""
Check runner for kvwatch.

Wires the pipeline for a single run: enumerate secrets, classify each
one, aggregate the report and hand it to the selected destination.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from kvwatch.alerting import BaseDestination, DeliveryResult, create_destination
from kvwatch.collectors import KeyVaultCollector
from kvwatch.config import CredentialBundle, EffectiveConfig
from kvwatch.engine import ExpiryClassifier
from kvwatch.reporting import Report, ReportBuilder

logger = logging.getLogger(__name__)


class RunOutcome(Enum):
    """How a successful run ended."""

    NOTHING_TO_REPORT = "nothing_to_report"
    DELIVERED = "delivered"


@dataclass
class RunResult:
    """
    Result of a completed run.

    Attributes:
        outcome: Whether a report was delivered
        report: The aggregated report
        secrets_checked: Number of secrets enumerated
        secrets_ignored: Number of secrets skipped by ignore tag
        duration_seconds: Wall-clock duration of the run
        delivery: Delivery result, if a report was sent
    """

    outcome: RunOutcome
    report: Report
    secrets_checked: int = 0
    secrets_ignored: int = 0
    duration_seconds: float = 0.0
    delivery: DeliveryResult | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "outcome": self.outcome.value,
            "secrets_checked": self.secrets_checked,
            "secrets_ignored": self.secrets_ignored,
            "duration_seconds": round(self.duration_seconds, 2),
            "report": self.report.to_dict(),
        }


def vault_access_hints(credentials: CredentialBundle) -> list[str]:
    """
    Explain a vault access failure.

    Distinguishes missing service-principal variables from other
    failures, where the underlying error is what matters.
    """
    if not credentials.has_vault_credentials:
        return [
            "It seems like you have not set the required "
            "authentication-related environment variables",
            "See usage (--help) to figure out which are required",
        ]
    return ["The error stack was as follows:"]


def run_check(
    config: EffectiveConfig,
    credentials: CredentialBundle,
    collector: KeyVaultCollector | None = None,
    destination: BaseDestination | None = None,
    now: datetime | None = None,
) -> RunResult:
    """
    Run one expiry check.

    The destination is created and verified before the vault is read,
    so channel misconfiguration fails fast.

    Args:
        config: Resolved configuration
        credentials: Credentials read from the environment
        collector: Optional collector (default: KeyVaultCollector for the vault)
        destination: Optional destination (default: from the configured channel)
        now: Reference instant (default: current UTC time)

    Returns:
        RunResult describing the run

    Raises:
        ConfigError: If the channel is missing a required argument
        CredentialError: If channel credentials are missing
        VaultAccessError: If the vault cannot be read
        DeliveryError: If sending the report fails
    """
    start_time = time.time()

    if destination is None:
        destination = create_destination(config, credentials)
    destination.verify()

    if collector is None:
        collector = KeyVaultCollector(config.vault_url)
    if now is None:
        now = datetime.now(timezone.utc)

    logger.info(f"Checking secrets in {collector.vault_url}")

    classifier = ExpiryClassifier(config.ignore_tags)
    builder = ReportBuilder()
    checked = 0
    ignored = 0

    for record in collector.iter_secrets():
        checked += 1
        classification = classifier.classify(record, now)
        if classification.skipped:
            ignored += 1
            continue
        builder.add(classification.messages)

    report = builder.build()
    logger.debug(f"Report counts: {report.counts()}")

    result = RunResult(
        outcome=RunOutcome.NOTHING_TO_REPORT,
        report=report,
        secrets_checked=checked,
        secrets_ignored=ignored,
    )

    if not report.has_actionable:
        logger.info("No secrets expired / soon expiring")
        result.duration_seconds = time.time() - start_time
        return result

    result.delivery = destination.deliver(report)
    result.outcome = RunOutcome.DELIVERED
    result.duration_seconds = time.time() - start_time
    logger.info(
        f"Checked {checked} secrets ({ignored} ignored) in "
        f"{result.duration_seconds:.2f}s, sent {len(report)} messages via {destination.name}"
    )
    return result
