"""
Collectors for kvwatch.

Collectors read secret metadata from a vault service and yield
SecretRecord objects.
"""

from kvwatch.collectors.keyvault import KeyVaultCollector

__all__ = ["KeyVaultCollector"]
