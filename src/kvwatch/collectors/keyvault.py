"""
Azure Key Vault collector for kvwatch.

Enumerates the secrets of a vault and yields their metadata as
SecretRecord objects. All API calls are read-only.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from azure.core.exceptions import AzureError
from azure.identity import CredentialUnavailableError, DefaultAzureCredential
from azure.keyvault.secrets import SecretClient

from kvwatch.errors import VaultAccessError
from kvwatch.models import SecretRecord

logger = logging.getLogger(__name__)


class KeyVaultCollector:
    """
    Collects secret metadata from an Azure Key Vault.

    Secrets are listed page by page and each one is fetched by name to
    obtain its full properties. Records are yielded lazily, in the order
    the vault lists them.
    """

    collector_name = "azure_keyvault"

    def __init__(
        self,
        vault_url: str,
        credential: Any | None = None,
        client: SecretClient | None = None,
    ) -> None:
        """
        Initialize the Key Vault collector.

        Args:
            vault_url: Vault endpoint, e.g. https://myvault.vault.azure.net
            credential: Optional Azure credential object
            client: Optional pre-built SecretClient
        """
        self._vault_url = vault_url
        self._credential = credential
        self._client = client

    @property
    def vault_url(self) -> str:
        """Get the vault endpoint URL."""
        return self._vault_url

    def _get_client(self) -> SecretClient:
        """Get or create the SecretClient."""
        if self._client is None:
            if self._credential is None:
                self._credential = DefaultAzureCredential()
            self._client = SecretClient(
                vault_url=self._vault_url,
                credential=self._credential,
            )
        return self._client

    def iter_secrets(self) -> Iterator[SecretRecord]:
        """
        Yield metadata for every secret in the vault.

        Raises:
            VaultAccessError: If listing or fetching fails, or the vault
                returns a secret without a creation date
        """
        try:
            client = self._get_client()
            for properties in client.list_properties_of_secrets():
                secret = client.get_secret(properties.name)
                yield self._to_record(secret)
        except (AzureError, CredentialUnavailableError) as e:
            raise VaultAccessError(
                f"Failed to read secrets from {self._vault_url}: {e}"
            ) from e

    def collect(self) -> list[SecretRecord]:
        """Collect all secret records into a list."""
        return list(self.iter_secrets())

    def _to_record(self, secret: Any) -> SecretRecord:
        """Convert a KeyVaultSecret into a SecretRecord."""
        properties = secret.properties
        if properties.created_on is None:
            raise VaultAccessError(
                f"Secret {secret.name} has no creation date"
            )

        record = SecretRecord(
            name=secret.name,
            created_on=properties.created_on,
            expires_on=properties.expires_on,
            tags=dict(properties.tags or {}),
        )
        logger.debug(
            f"Fetched secret {record.name} "
            f"(created {record.created_on}, expires {record.expires_on})"
        )
        return record
