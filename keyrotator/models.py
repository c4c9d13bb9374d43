"""
Data models for rotation.

Plain dataclasses, matching the frozen-dataclass pattern in keyrotator.config.
Wire payloads are parsed by the pydantic models in keyrotator.vault.models and
keyrotator.identity.models and converted into these.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum


class OutcomeStatus(StrEnum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailureReason(StrEnum):
    NOT_FOUND = "not_found"
    AMBIGUOUS_MATCH = "ambiguous_match"
    FORBIDDEN = "forbidden"
    PROVIDER_ERROR = "provider_error"
    VAULT_ERROR = "vault_error"
    UNEXPECTED = "unexpected"


class RotationState(StrEnum):
    IDLE = "idle"
    DISCOVERING = "discovering"
    SKIPPED = "skipped"
    FOUND = "found"
    GENERATING = "generating"
    NAMING = "naming"
    PROVISIONING = "provisioning"
    PROVISIONED = "provisioned"
    PERSISTING = "persisting"
    FAILED = "failed"
    COMPLETED = "completed"


@dataclass(frozen=True)
class PasswordCredential:
    """A password credential on an identity. ``value`` is only set on new credentials."""

    key_id: str
    name: str
    start: datetime
    end: datetime
    value: str | None = None

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class ApplicationIdentity:
    """A directory-registered application and its current password credentials."""

    object_id: str
    display_name: str = ""
    app_id: str = ""
    credentials: tuple[PasswordCredential, ...] = ()

    @property
    def credential_names(self) -> set[str]:
        return {c.name for c in self.credentials}


@dataclass(frozen=True)
class SecretRecord:
    """A vault entry. List results carry no value and no version."""

    name: str
    tags: dict[str, str] = field(default_factory=dict)
    value: str | None = None
    version: str | None = None


@dataclass
class Outcome:
    """Result of one rotate() call.

    ``state`` is the step that was running when the rotation ended: the
    terminal state for skipped and completed runs, the failing step for failed
    ones. A failure in ``persisting`` means the credential named
    ``credential_name`` was already added to the identity. ``failed`` is used
    only when the step is unknown (an unexpected error caught by rotate_all).
    """

    identity_id: str
    status: OutcomeStatus
    state: RotationState
    reason: FailureReason | None = None
    secret_name: str | None = None
    credential_name: str | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status != OutcomeStatus.FAILED

    def __str__(self) -> str:
        parts = [f"{self.identity_id}: {self.status}"]
        if self.reason:
            parts.append(f"({self.reason})")
        if self.secret_name:
            parts.append(f"secret={self.secret_name}")
        if self.credential_name:
            parts.append(f"credential={self.credential_name}")
        if self.detail:
            parts.append(f"- {self.detail}")
        return " ".join(parts)


@dataclass
class AggregateOutcome:
    """Per-identity outcomes of a rotate_all() run, in processing order."""

    outcomes: dict[str, Outcome] = field(default_factory=dict)

    def add(self, outcome: Outcome) -> None:
        self.outcomes[outcome.identity_id] = outcome

    def _with_status(self, status: OutcomeStatus) -> list[Outcome]:
        return [o for o in self.outcomes.values() if o.status == status]

    @property
    def completed(self) -> list[Outcome]:
        return self._with_status(OutcomeStatus.COMPLETED)

    @property
    def skipped(self) -> list[Outcome]:
        return self._with_status(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> list[Outcome]:
        return self._with_status(OutcomeStatus.FAILED)

    @property
    def ok(self) -> bool:
        return not self.failed

    def __getitem__(self, identity_id: str) -> Outcome:
        return self.outcomes[identity_id]

    def __len__(self) -> int:
        return len(self.outcomes)
