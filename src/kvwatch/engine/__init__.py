"""
Classification engine for kvwatch.
"""

from kvwatch.engine.classifier import (
    ONE_MONTH,
    Classification,
    ExpiryClassifier,
    assumed_expiry,
    classify_secret,
)

__all__ = [
    "ONE_MONTH",
    "Classification",
    "ExpiryClassifier",
    "assumed_expiry",
    "classify_secret",
]
