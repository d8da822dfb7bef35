"""
Secret data model for kvwatch.

SecretRecord is the read-only view of a vault secret that the expiry
classifier works on. Values are never read; only metadata is kept.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class SecretRecord:
    """
    Metadata of a single vault secret.

    Attributes:
        name: Secret name
        created_on: When the secret was created (timezone-aware)
        expires_on: Explicit expiry, or None if the secret has none
        tags: Tag key/value pairs set on the secret
    """

    name: str
    created_on: datetime
    expires_on: datetime | None = None
    tags: dict[str, str] = field(default_factory=dict)

    def has_expiry(self) -> bool:
        """Check if an explicit expiry date is set."""
        return self.expires_on is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "created_on": self.created_on.isoformat(),
            "expires_on": self.expires_on.isoformat() if self.expires_on else None,
            "tags": dict(self.tags),
        }
