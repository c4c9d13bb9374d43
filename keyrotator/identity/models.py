"""Directory wire models for applications and their password credentials."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from keyrotator.models import ApplicationIdentity, PasswordCredential


class PasswordCredentialPayload(BaseModel):
    """``passwordCredentials[]`` entry. The directory never echoes ``secretText``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    key_id: str = Field(alias="keyId")
    display_name: str | None = Field(default=None, alias="displayName")
    start: datetime = Field(alias="startDateTime")
    end: datetime = Field(alias="endDateTime")
    secret_text: str | None = Field(default=None, alias="secretText")

    @classmethod
    def from_credential(cls, cred: PasswordCredential) -> PasswordCredentialPayload:
        return cls(
            key_id=cred.key_id,
            display_name=cred.name,
            start=cred.start,
            end=cred.end,
            secret_text=cred.value,
        )

    def to_credential(self) -> PasswordCredential:
        return PasswordCredential(
            key_id=self.key_id,
            name=self.display_name or "",
            start=self.start,
            end=self.end,
            value=self.secret_text,
        )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ApplicationPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    app_id: str = Field(default="", alias="appId")
    display_name: str = Field(default="", alias="displayName")
    password_credentials: list[PasswordCredentialPayload] = Field(
        default_factory=list, alias="passwordCredentials"
    )

    def to_identity(self) -> ApplicationIdentity:
        return ApplicationIdentity(
            object_id=self.id,
            display_name=self.display_name,
            app_id=self.app_id,
            credentials=tuple(p.to_credential() for p in self.password_credentials),
        )
