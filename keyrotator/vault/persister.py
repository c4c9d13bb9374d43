"""Writes rotated values back to the vault."""

from __future__ import annotations

import logging

from keyrotator.models import SecretRecord
from keyrotator.vault.client import KeyVaultClient

logger = logging.getLogger(__name__)


class SecretPersister:
    """Stores a new secret version, carrying the matched record's tags forward."""

    def __init__(self, client: KeyVaultClient) -> None:
        self.client = client

    async def persist(self, name: str, value: str, tags: dict[str, str]) -> SecretRecord:
        # Tags are copied, never recomputed, so the identity link survives the write.
        logger.debug("Set new value for secret '%s' in '%s'", name, self.client.vault_url)
        record = await self.client.set_secret(name, value, dict(tags))
        logger.info("Updated the secret '%s' with a new value in the vault", name)
        return record
