"""
Centralized configuration for keyrotator.

All configuration is loaded from environment variables with sensible defaults.
Tokens are expected ready-made; acquiring them is the caller's job.

Usage:
    from keyrotator.config import get_config
    cfg = get_config()
    print(cfg.key_vault_url)            # "https://my-vault.vault.azure.net"
    print(cfg.credential_duration)      # 0:05:00
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta

from keyrotator.errors import ConfigurationError

DEFAULT_DIRECTORY_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_TAG_NAME = "ApplicationObjectId"
DEFAULT_CREDENTIAL_BASE_NAME = "RotatedKey"


@dataclass(frozen=True)
class RotatorConfig:
    """Vault, directory and credential settings."""

    # Vault
    key_vault_url: str = ""
    vault_api_version: str = "7.4"
    vault_token: str = ""

    # Identity provider
    directory_url: str = DEFAULT_DIRECTORY_URL
    directory_token: str = ""

    # Credentials
    credential_base_name: str = DEFAULT_CREDENTIAL_BASE_NAME
    credential_duration_minutes: int = 5
    tag_name: str = DEFAULT_TAG_NAME

    http_timeout: float = 30.0

    @property
    def credential_duration(self) -> timedelta:
        return timedelta(minutes=self.credential_duration_minutes)

    def require_vault_url(self) -> str:
        """Return the vault URL or raise if it is not configured."""
        if not self.key_vault_url.strip():
            raise ConfigurationError(
                "Missing environment variable 'KEYROTATOR_KEY_VAULT_URL' "
                "with as value the url of the key vault"
            )
        return self.key_vault_url.rstrip("/")


# Singleton
_config: RotatorConfig | None = None


def get_config() -> RotatorConfig:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> RotatorConfig:
    """Load configuration from environment variables."""
    return RotatorConfig(
        key_vault_url=os.environ.get("KEYROTATOR_KEY_VAULT_URL", "")
        or os.environ.get("KeyVaultUrl", ""),
        vault_api_version=os.environ.get("KEYROTATOR_VAULT_API_VERSION", "7.4"),
        vault_token=os.environ.get("KEYROTATOR_VAULT_TOKEN", ""),
        directory_url=os.environ.get("KEYROTATOR_DIRECTORY_URL", DEFAULT_DIRECTORY_URL),
        directory_token=os.environ.get("KEYROTATOR_DIRECTORY_TOKEN", ""),
        credential_base_name=os.environ.get(
            "KEYROTATOR_CREDENTIAL_BASE_NAME", DEFAULT_CREDENTIAL_BASE_NAME
        ),
        credential_duration_minutes=int(
            os.environ.get("KEYROTATOR_CREDENTIAL_DURATION_MINUTES", "5")
        ),
        tag_name=os.environ.get("KEYROTATOR_TAG_NAME", DEFAULT_TAG_NAME),
        http_timeout=float(os.environ.get("KEYROTATOR_HTTP_TIMEOUT", "30")),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
