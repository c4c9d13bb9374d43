"""
Async client for the directory's application REST API.

Wraps httpx.AsyncClient. HTTP 403 maps to ForbiddenError, 404 to
NotFoundError, anything else to ProviderError carrying the response body.

Note: PATCHing ``passwordCredentials`` REPLACES the whole list. Callers that
want to add a credential must go through CredentialProvisioner.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from keyrotator.config import DEFAULT_DIRECTORY_URL
from keyrotator.errors import ForbiddenError, NotFoundError, ProviderError
from keyrotator.identity.models import ApplicationPayload, PasswordCredentialPayload
from keyrotator.models import ApplicationIdentity, PasswordCredential

logger = logging.getLogger(__name__)


def _raise_for_status(resp: httpx.Response, what: str) -> None:
    if resp.is_success:
        return
    if resp.status_code == 403:
        raise ForbiddenError(f"Forbidden to {what}", payload=resp.text)
    if resp.status_code == 404:
        raise NotFoundError(f"Can't {what}: not found", payload=resp.text)
    raise ProviderError(f"Failed to {what}: HTTP {resp.status_code}", payload=resp.text)


class DirectoryClient:
    """Async client for application identities in the directory."""

    def __init__(
        self,
        base_url: str = DEFAULT_DIRECTORY_URL,
        token: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=self.base_url, headers=headers, timeout=timeout, transport=transport
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> DirectoryClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ProviderError(f"{method} {url} failed: {e}") from e

    async def get_identity(self, object_id: str) -> ApplicationIdentity:
        """GET /applications/{id} — always a fresh read."""
        logger.debug("Searching for application with object id '%s'", object_id)
        resp = await self._request("GET", f"/applications/{object_id}")
        _raise_for_status(resp, f"get application with id '{object_id}'")
        try:
            identity = ApplicationPayload.model_validate(resp.json()).to_identity()
        except (ValueError, ValidationError) as e:
            raise ProviderError(
                f"Malformed application '{object_id}'", payload=resp.text
            ) from e
        logger.info(
            "Found application '%s' by id '%s' and appId '%s'",
            identity.display_name,
            identity.object_id,
            identity.app_id,
        )
        return identity

    async def list_credential_names(self, identity: ApplicationIdentity) -> set[str]:
        """Names of the credentials currently on the identity (re-read, not cached)."""
        current = await self.get_identity(identity.object_id)
        return current.credential_names

    async def replace_credentials(
        self, object_id: str, credentials: Sequence[PasswordCredential]
    ) -> None:
        """PATCH the full password credential list. Entries not submitted are removed."""
        body = {
            "passwordCredentials": [
                PasswordCredentialPayload.from_credential(c).to_wire() for c in credentials
            ]
        }
        resp = await self._request("PATCH", f"/applications/{object_id}", json=body)
        _raise_for_status(resp, f"set credentials for application with id '{object_id}'")
