"""
Root-level shared test fixtures.

Inherited by every test suite that runs from the repo root.
"""

from __future__ import annotations

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove keyrotator env vars that leak between tests."""
    for key in [
        "KEYROTATOR_KEY_VAULT_URL",
        "KeyVaultUrl",
        "KEYROTATOR_VAULT_API_VERSION",
        "KEYROTATOR_VAULT_TOKEN",
        "KEYROTATOR_DIRECTORY_URL",
        "KEYROTATOR_DIRECTORY_TOKEN",
        "KEYROTATOR_CREDENTIAL_BASE_NAME",
        "KEYROTATOR_CREDENTIAL_DURATION_MINUTES",
        "KEYROTATOR_TAG_NAME",
        "KEYROTATOR_HTTP_TIMEOUT",
    ]:
        monkeypatch.delenv(key, raising=False)
