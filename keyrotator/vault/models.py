"""Key Vault wire models."""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from keyrotator.models import SecretRecord


def _split_secret_id(secret_id: str) -> tuple[str, str | None]:
    """``https://v.vault.azure.net/secrets/<name>[/<version>]`` → (name, version)."""
    parts = [p for p in urlparse(secret_id).path.split("/") if p]
    if len(parts) < 2 or parts[0] != "secrets":
        raise ValueError(f"Not a secret identifier: {secret_id!r}")
    version = parts[2] if len(parts) > 2 else None
    return parts[1], version


class SecretItem(BaseModel):
    """One secret as returned by the list and get endpoints."""

    model_config = ConfigDict(extra="ignore")

    id: str
    value: str | None = None
    tags: dict[str, str] | None = None

    @field_validator("id")
    @classmethod
    def check_secret_id(cls, value: str) -> str:
        _split_secret_id(value)
        return value

    def to_record(self) -> SecretRecord:
        name, version = _split_secret_id(self.id)
        return SecretRecord(name=name, tags=dict(self.tags or {}), value=self.value, version=version)


class SecretListPage(BaseModel):
    """A page of the secret listing; ``nextLink`` is the continuation."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    value: list[SecretItem] = []
    next_link: str | None = Field(default=None, alias="nextLink")
