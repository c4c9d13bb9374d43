"""
Test fixtures for keyrotator.

The vault and the directory are in-memory fakes served through
httpx.MockTransport, so the real REST clients are exercised end to end.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable
from datetime import timedelta

import httpx
import pytest

from keyrotator.engine import RotationEngine
from keyrotator.identity.client import DirectoryClient
from keyrotator.identity.provisioner import CredentialProvisioner
from keyrotator.vault.catalog import SecretCatalog
from keyrotator.vault.client import KeyVaultClient
from keyrotator.vault.persister import SecretPersister

VAULT_URL = "https://vault.test"
DIRECTORY_URL = "https://directory.test/v1.0"


class FakeVault:
    """Key Vault secrets API over a dict. Lists ``page_size`` secrets per page."""

    def __init__(self, page_size: int = 25) -> None:
        self.page_size = page_size
        self.secrets: dict[str, dict] = {}
        self.writes: list[dict] = []
        self.list_calls = 0
        self.fail_list_on_page: int | None = None
        self.fail_writes = False

    def add(self, name: str, value: str = "initial", tags: dict[str, str] | None = None) -> None:
        self.secrets[name] = {"value": value, "tags": dict(tags or {}), "version": uuid.uuid4().hex}

    def _item(self, name: str, with_value: bool) -> dict:
        s = self.secrets[name]
        item = {"id": f"{VAULT_URL}/secrets/{name}/{s['version']}", "tags": s["tags"]}
        if with_value:
            item["value"] = s["value"]
        else:
            item["id"] = f"{VAULT_URL}/secrets/{name}"
        return item

    def handler(self, request: httpx.Request) -> httpx.Response:
        parts = [p for p in request.url.path.split("/") if p]
        if request.method == "GET" and parts == ["secrets"]:
            page = int(request.url.params.get("$skiptoken", "0"))
            self.list_calls += 1
            if self.fail_list_on_page == page:
                return httpx.Response(503, json={"error": {"code": "ServiceUnavailable"}})
            names = sorted(self.secrets)
            chunk = names[page * self.page_size : (page + 1) * self.page_size]
            body: dict = {"value": [self._item(n, with_value=False) for n in chunk], "nextLink": None}
            if (page + 1) * self.page_size < len(names):
                body["nextLink"] = f"{VAULT_URL}/secrets?api-version=7.4&$skiptoken={page + 1}"
            return httpx.Response(200, json=body)
        if len(parts) == 2 and parts[0] == "secrets":
            name = parts[1]
            if request.method == "GET":
                if name not in self.secrets:
                    return httpx.Response(404, json={"error": {"code": "SecretNotFound"}})
                return httpx.Response(200, json=self._item(name, with_value=True))
            if request.method == "PUT":
                if self.fail_writes:
                    return httpx.Response(500, json={"error": {"code": "InternalError"}})
                payload = json.loads(request.content)
                self.writes.append({"name": name, **payload})
                self.add(name, payload["value"], payload.get("tags"))
                item = self._item(name, with_value=False)
                item["id"] = f"{VAULT_URL}/secrets/{name}/{self.secrets[name]['version']}"
                return httpx.Response(200, json=item)
        return httpx.Response(400, json={"error": {"code": "BadRequest"}})


class FakeDirectory:
    """Application API whose PATCH replaces the credential list, like the real one."""

    def __init__(self) -> None:
        self.apps: dict[str, dict] = {}
        self.patches: list[dict] = []
        self.forbidden: set[str] = set()
        self.after_patch: Callable[[str], None] | None = None

    def add_app(self, object_id: str, credential_names: list[str] | None = None) -> None:
        creds = [
            {
                "keyId": str(uuid.uuid4()),
                "displayName": n,
                "startDateTime": "2024-01-01T00:00:00Z",
                "endDateTime": "2030-01-01T00:00:00Z",
                "secretText": "hidden",
            }
            for n in credential_names or []
        ]
        self.apps[object_id] = {
            "id": object_id,
            "appId": f"app-{object_id}",
            "displayName": f"Application {object_id}",
            "passwordCredentials": creds,
        }

    def append_credential(self, object_id: str, name: str) -> None:
        self.apps[object_id]["passwordCredentials"].append(
            {
                "keyId": str(uuid.uuid4()),
                "displayName": name,
                "startDateTime": "2024-01-01T00:00:00Z",
                "endDateTime": "2030-01-01T00:00:00Z",
            }
        )

    def remove_credential(self, object_id: str, name: str) -> None:
        creds = self.apps[object_id]["passwordCredentials"]
        self.apps[object_id]["passwordCredentials"] = [
            c for c in creds if c["displayName"] != name
        ]

    def names(self, object_id: str) -> list[str]:
        return [c["displayName"] for c in self.apps[object_id]["passwordCredentials"]]

    def handler(self, request: httpx.Request) -> httpx.Response:
        parts = [p for p in request.url.path.split("/") if p]
        object_id = parts[-1]
        if parts[-2:-1] != ["applications"]:
            return httpx.Response(400, json={"error": {"code": "BadRequest"}})
        if object_id not in self.apps:
            return httpx.Response(404, json={"error": {"code": "Request_ResourceNotFound"}})
        if request.method == "GET":
            app = dict(self.apps[object_id])
            app["passwordCredentials"] = [
                {k: v for k, v in c.items() if k != "secretText"} for c in app["passwordCredentials"]
            ]
            return httpx.Response(200, json=app)
        if request.method == "PATCH":
            if object_id in self.forbidden:
                return httpx.Response(
                    403, json={"error": {"code": "Authorization_RequestDenied"}}
                )
            payload = json.loads(request.content)
            self.patches.append(payload)
            self.apps[object_id]["passwordCredentials"] = payload["passwordCredentials"]
            if self.after_patch:
                self.after_patch(object_id)
            return httpx.Response(204)
        return httpx.Response(405)


@pytest.fixture
def fake_vault() -> FakeVault:
    return FakeVault()


@pytest.fixture
def fake_directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def vault_client(fake_vault: FakeVault) -> KeyVaultClient:
    return KeyVaultClient(VAULT_URL, token="vault-token", transport=httpx.MockTransport(fake_vault.handler))


@pytest.fixture
def directory_client(fake_directory: FakeDirectory) -> DirectoryClient:
    return DirectoryClient(
        DIRECTORY_URL, token="graph-token", transport=httpx.MockTransport(fake_directory.handler)
    )


@pytest.fixture
def engine(vault_client: KeyVaultClient, directory_client: DirectoryClient) -> RotationEngine:
    return RotationEngine(
        SecretCatalog(vault_client),
        directory_client,
        CredentialProvisioner(directory_client),
        SecretPersister(vault_client),
        credential_duration=timedelta(minutes=5),
    )
