"""
Expiry classifier for kvwatch.

Classifies a secret as healthy, expiring soon or expired relative to a
reference instant, and produces the report messages for it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable

from kvwatch.models import ClassifiedMessage, SecretRecord, Severity

logger = logging.getLogger(__name__)

# Fixed 31 days, not a calendar month.
ONE_MONTH = timedelta(milliseconds=31 * 24 * 60 * 60 * 1000)


@dataclass
class Classification:
    """
    Outcome of classifying one secret.

    Attributes:
        secret_name: Name of the classified secret
        skipped: True if an ignore tag matched
        expires_on: Expiry used for the comparison (explicit or assumed)
        messages: Messages produced, in emission order
    """

    secret_name: str
    skipped: bool = False
    expires_on: datetime | None = None
    messages: list[ClassifiedMessage] = field(default_factory=list)


def assumed_expiry(created_on: datetime) -> datetime:
    """
    Assume an expiry one calendar year after creation.

    A Feb 29 creation date rolls over to Mar 1 of the following year.
    """
    try:
        return created_on.replace(year=created_on.year + 1)
    except ValueError:
        return created_on.replace(year=created_on.year + 1, month=3, day=1)


class ExpiryClassifier:
    """
    Classifies secrets by expiry status.

    A secret carrying any of the ignore tags is skipped. A secret without
    an expiry date is assumed to expire one year after creation, which is
    reported as an informational message.
    """

    def __init__(self, ignore_tags: Iterable[str] = ()) -> None:
        """
        Initialize the classifier.

        Args:
            ignore_tags: Tag keys whose presence suppresses reporting
        """
        self._ignore_tags = frozenset(ignore_tags)

    @property
    def ignore_tags(self) -> frozenset[str]:
        """Get the ignore-tag set."""
        return self._ignore_tags

    def is_ignored(self, secret: SecretRecord) -> bool:
        """Check if the secret carries any ignore tag."""
        return not self._ignore_tags.isdisjoint(secret.tags or {})

    def classify(self, secret: SecretRecord, now: datetime | None = None) -> Classification:
        """
        Classify a secret against the reference instant.

        Args:
            secret: Secret to classify
            now: Reference instant (default: current UTC time)

        Returns:
            Classification holding zero to two messages
        """
        if now is None:
            now = datetime.now(timezone.utc)

        name = secret.name
        if self.is_ignored(secret):
            logger.info(f"Ignoring {name}")
            return Classification(secret_name=name, skipped=True)

        info: ClassifiedMessage | None = None
        expires_on = secret.expires_on
        if not secret.has_expiry():
            expires_on = assumed_expiry(secret.created_on)
            info = ClassifiedMessage(
                severity=Severity.INFO,
                text=f"{name} has no expiry date set, assuming createdDate + 1 year",
                secret_name=name,
            )

        result = Classification(secret_name=name, expires_on=expires_on)

        if expires_on - ONE_MONTH > now:
            if info:
                result.messages.append(info)
        elif expires_on < now:
            # The no-expiry note is dropped here, unlike the other branches.
            result.messages.append(
                ClassifiedMessage(
                    severity=Severity.CRITICAL,
                    text=f"{name} expired at {expires_on.isoformat()}",
                    secret_name=name,
                )
            )
        else:
            result.messages.append(
                ClassifiedMessage(
                    severity=Severity.WARNING,
                    text=f"{name} expires in less than 30 days ({expires_on.isoformat()})",
                    secret_name=name,
                )
            )
            if info:
                result.messages.append(info)

        logger.debug(f"Classified {name}: {[m.severity.name for m in result.messages]}")
        return result


def classify_secret(
    secret: SecretRecord,
    now: datetime | None = None,
    ignore_tags: Iterable[str] = (),
) -> list[ClassifiedMessage]:
    """
    Classify a single secret and return its messages.

    Convenience wrapper around ExpiryClassifier for one-off use.
    """
    return ExpiryClassifier(ignore_tags).classify(secret, now).messages
