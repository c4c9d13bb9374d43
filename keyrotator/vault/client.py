"""
Async client for the Key Vault secrets REST API.

Wraps httpx.AsyncClient. Every failure surfaces as VaultError (or
NotFoundError for a missing secret) carrying the vault's response body.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx
from pydantic import ValidationError

from keyrotator.errors import NotFoundError, VaultError
from keyrotator.models import SecretRecord
from keyrotator.vault.models import SecretItem, SecretListPage

logger = logging.getLogger(__name__)


class KeyVaultClient:
    """Async client for one vault."""

    def __init__(
        self,
        vault_url: str,
        token: str = "",
        api_version: str = "7.4",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.vault_url = vault_url.rstrip("/")
        self.api_version = api_version
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=self.vault_url, headers=headers, timeout=timeout, transport=transport
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> KeyVaultClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise VaultError(f"{method} {url} failed: {e}") from e
        return resp

    async def list_secrets_page(self, url: str | None = None) -> SecretListPage:
        """GET one page of secrets. ``url`` is a nextLink, or None for the first page."""
        if url is None:
            resp = await self._request("GET", "/secrets", params={"api-version": self.api_version})
        else:
            # The bearer token is a default header; never send it off-vault.
            link, base = httpx.URL(url), httpx.URL(self.vault_url)
            if link.is_absolute_url and (link.scheme, link.host, link.port) != (
                base.scheme,
                base.host,
                base.port,
            ):
                raise VaultError(
                    f"Refusing nextLink outside '{self.vault_url}'", payload=url
                )
            resp = await self._request("GET", url)
        if resp.status_code != 200:
            raise VaultError(
                f"Listing secrets in '{self.vault_url}' returned HTTP {resp.status_code}",
                payload=resp.text,
            )
        try:
            return SecretListPage.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise VaultError("Malformed secret listing", payload=resp.text) from e

    async def iter_secret_pages(self) -> AsyncIterator[list[SecretRecord]]:
        """Yield pages of secrets, following nextLink until exhausted."""
        page = await self.list_secrets_page()
        yield [item.to_record() for item in page.value]
        while page.next_link:
            logger.debug("Found another page with secrets. Get secrets from '%s'", page.next_link)
            page = await self.list_secrets_page(page.next_link)
            yield [item.to_record() for item in page.value]

    async def get_secret(self, name: str) -> SecretRecord:
        """GET the current version of a secret, value included."""
        resp = await self._request(
            "GET", f"/secrets/{name}", params={"api-version": self.api_version}
        )
        if resp.status_code == 404:
            raise NotFoundError(f"Secret '{name}' not found", payload=resp.text)
        if resp.status_code != 200:
            raise VaultError(
                f"Reading secret '{name}' returned HTTP {resp.status_code}", payload=resp.text
            )
        try:
            return SecretItem.model_validate(resp.json()).to_record()
        except (ValueError, ValidationError) as e:
            raise VaultError(f"Malformed secret '{name}'", payload=resp.text) from e

    async def set_secret(self, name: str, value: str, tags: dict[str, str]) -> SecretRecord:
        """PUT a new version of a secret. The returned record has no value."""
        resp = await self._request(
            "PUT",
            f"/secrets/{name}",
            params={"api-version": self.api_version},
            json={"value": value, "tags": tags},
        )
        if resp.status_code != 200:
            raise VaultError(
                f"Writing secret '{name}' returned HTTP {resp.status_code}", payload=resp.text
            )
        try:
            item = SecretItem.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise VaultError(f"Malformed response writing '{name}'", payload=resp.text) from e
        record = item.to_record()
        return SecretRecord(name=record.name, tags=record.tags, version=record.version)
