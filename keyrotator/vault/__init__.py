"""Vault side of rotation: listing, tag matching, and persisting secrets."""

from keyrotator.vault.catalog import SecretCatalog, find_by_identity, tagged_identity_ids
from keyrotator.vault.client import KeyVaultClient
from keyrotator.vault.persister import SecretPersister

__all__ = [
    "KeyVaultClient",
    "SecretCatalog",
    "SecretPersister",
    "find_by_identity",
    "tagged_identity_ids",
]
