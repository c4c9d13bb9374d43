"""
Secret discovery — enumerating the vault and matching secrets to identities.

A secret belongs to an identity when its ``ApplicationObjectId`` tag holds
the identity's object id. At most one secret may carry a given id.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable

from keyrotator.config import DEFAULT_TAG_NAME
from keyrotator.errors import AmbiguousMatchError
from keyrotator.models import SecretRecord
from keyrotator.vault.client import KeyVaultClient

logger = logging.getLogger(__name__)


class SecretCatalog:
    """Paginated enumeration of every secret in one vault."""

    def __init__(self, client: KeyVaultClient) -> None:
        self.client = client

    async def iter_secrets(self) -> AsyncIterator[SecretRecord]:
        """Yield secrets lazily; pages are fetched only as they are consumed."""
        async for page in self.client.iter_secret_pages():
            for record in page:
                yield record

    async def list_all(self) -> list[SecretRecord]:
        """Return every secret. Raises VaultError if any page fails; never a partial list."""
        logger.info("Get all secrets from '%s'", self.client.vault_url)
        secrets = [record async for record in self.iter_secrets()]
        logger.debug("Found in total %d secret(s)", len(secrets))
        return secrets


def find_by_identity(
    identity_id: str,
    secrets: Iterable[SecretRecord],
    tag_name: str = DEFAULT_TAG_NAME,
) -> SecretRecord | None:
    """Return the single secret tagged with ``identity_id``, or None.

    Raises AmbiguousMatchError if more than one secret carries the tag value.
    """
    logger.debug("Get secret with the tag '%s' and value '%s'", tag_name, identity_id)
    matches = [s for s in secrets if s.tags.get(tag_name) == identity_id]
    if not matches:
        logger.info("No secret found with the tag '%s' and value '%s'", tag_name, identity_id)
        return None
    if len(matches) > 1:
        raise AmbiguousMatchError(identity_id, [s.name for s in matches])
    logger.info("Found secret '%s' for identity '%s'", matches[0].name, identity_id)
    return matches[0]


def tagged_identity_ids(
    secrets: Iterable[SecretRecord],
    tag_name: str = DEFAULT_TAG_NAME,
) -> list[str]:
    """Distinct identity ids referenced by the linkage tag, in first-seen order."""
    ids: dict[str, None] = {}
    for s in secrets:
        value = s.tags.get(tag_name)
        if value:
            ids.setdefault(value, None)
    return list(ids)
