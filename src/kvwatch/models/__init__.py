"""
Data models for kvwatch.

- SecretRecord: metadata of a vault secret
- Severity / ClassifiedMessage: one classified line of the expiry report
"""

from kvwatch.models.message import ClassifiedMessage, Severity
from kvwatch.models.secret import SecretRecord

__all__ = [
    "ClassifiedMessage",
    "SecretRecord",
    "Severity",
]
