"""
Adds a password credential to an identity without dropping existing ones.

The directory's update replaces the credential list wholesale, so every add
is read → merge → write → verify against the provider's current state.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta

from keyrotator.errors import ProviderError
from keyrotator.identity.client import DirectoryClient
from keyrotator.models import ApplicationIdentity, PasswordCredential

logger = logging.getLogger(__name__)


class CredentialProvisioner:
    """Registers new credentials on identities, strictly additively."""

    def __init__(self, client: DirectoryClient) -> None:
        self.client = client

    async def add_credential(
        self,
        identity: ApplicationIdentity,
        name: str,
        value: str,
        valid_from: datetime,
        duration: timedelta,
    ) -> ApplicationIdentity:
        """Add one credential and return the identity with it appended.

        The post-write check only insists that ``name`` is now present. Other
        actors may add or prune credentials concurrently; such differences are
        logged, not raised. Raises ForbiddenError, NotFoundError or
        ProviderError; ProviderError also covers a name already taken on the
        live identity and an update after which ``name`` is absent.
        """
        logger.debug("Add new secret to application with id '%s'", identity.object_id)

        current = await self.client.get_identity(identity.object_id)
        before = current.credential_names
        if name in before:
            raise ProviderError(
                f"Credential '{name}' already exists on application '{identity.object_id}'"
            )

        new = PasswordCredential(
            key_id=str(uuid.uuid4()),
            name=name,
            start=valid_from,
            end=valid_from + duration,
            value=value,
        )
        await self.client.replace_credentials(identity.object_id, [*current.credentials, new])

        after = await self.client.list_credential_names(current)
        if name not in after:
            raise ProviderError(
                f"Credential '{name}' is missing on application '{identity.object_id}' "
                "after the update",
                payload=f"present={sorted(after)}",
            )
        missing = before - after
        if missing:
            logger.warning(
                "Credentials %s on application '%s' disappeared during the update",
                sorted(missing),
                identity.object_id,
            )
        extra = after - before - {name}
        if extra:
            logger.warning(
                "Credentials %s were added to application '%s' by another actor",
                sorted(extra),
                identity.object_id,
            )

        logger.info(
            "Added new key with name '%s' to application with id '%s' that is valid from "
            "UTC '%s' with a duration of %s",
            name,
            identity.object_id,
            valid_from.isoformat(),
            duration,
        )
        return replace(current, credentials=(*current.credentials, replace(new, value=None)))
