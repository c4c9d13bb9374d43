"""
Rotation engine — orchestrates one rotation per identity.

Order per identity: discover the tagged secret, load the identity, generate a
value, allocate a name, provision on the directory, then persist to the vault.
Provisioning always precedes persisting: if only the first succeeds, the new
credential is valid and the old value is still published, which a retry
repairs. The reverse would lock consumers out.

Usage:
    engine, clients = build_engine(get_config())
    outcome = await engine.rotate("00000000-0000-0000-0000-000000000001")
    summary = await engine.rotate_all()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta

from keyrotator.config import (
    DEFAULT_CREDENTIAL_BASE_NAME,
    DEFAULT_TAG_NAME,
    RotatorConfig,
)
from keyrotator.errors import (
    AmbiguousMatchError,
    ForbiddenError,
    NotFoundError,
    RotationError,
    VaultError,
)
from keyrotator.identity.client import DirectoryClient
from keyrotator.identity.naming import allocate_name
from keyrotator.identity.provisioner import CredentialProvisioner
from keyrotator.models import (
    AggregateOutcome,
    FailureReason,
    Outcome,
    OutcomeStatus,
    RotationState,
    SecretRecord,
)
from keyrotator.secretgen import generate_secret_value
from keyrotator.vault.catalog import SecretCatalog, find_by_identity, tagged_identity_ids
from keyrotator.vault.client import KeyVaultClient
from keyrotator.vault.persister import SecretPersister

_module_logger = logging.getLogger(__name__)


def _reason_for(error: RotationError) -> FailureReason:
    if isinstance(error, AmbiguousMatchError):
        return FailureReason.AMBIGUOUS_MATCH
    if isinstance(error, ForbiddenError):
        return FailureReason.FORBIDDEN
    if isinstance(error, NotFoundError):
        return FailureReason.NOT_FOUND
    if isinstance(error, VaultError):
        return FailureReason.VAULT_ERROR
    return FailureReason.PROVIDER_ERROR


class RotationEngine:
    """Rotates identity credentials and republishes them, one identity at a time."""

    def __init__(
        self,
        catalog: SecretCatalog,
        directory: DirectoryClient,
        provisioner: CredentialProvisioner,
        persister: SecretPersister,
        *,
        logger: logging.Logger | None = None,
        tag_name: str = DEFAULT_TAG_NAME,
        credential_base_name: str = DEFAULT_CREDENTIAL_BASE_NAME,
        credential_duration: timedelta = timedelta(minutes=5),
        generate: Callable[[], str] = generate_secret_value,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self.catalog = catalog
        self.directory = directory
        self.provisioner = provisioner
        self.persister = persister
        self.log = logger or _module_logger
        self.tag_name = tag_name
        self.credential_base_name = credential_base_name
        self.credential_duration = credential_duration
        self._generate = generate
        self._clock = clock

    def _fail(
        self,
        identity_id: str,
        state: RotationState,
        error: RotationError,
        **fields: str | None,
    ) -> Outcome:
        reason = _reason_for(error)
        if reason == FailureReason.FORBIDDEN:
            self.log.error("%s (identity '%s')", error.message, identity_id)
            if error.payload:
                self.log.debug("Extra info for identity '%s': '%s'", identity_id, error.payload)
        else:
            self.log.error(
                "Rotation for identity '%s' failed while %s: %s%s",
                identity_id,
                state,
                error.message,
                f" | {error.payload}" if error.payload else "",
            )
        return Outcome(
            identity_id=identity_id,
            status=OutcomeStatus.FAILED,
            state=state,
            reason=reason,
            detail=error.payload or error.message,
            **fields,
        )

    async def rotate(
        self, identity_id: str, *, secrets: Sequence[SecretRecord] | None = None
    ) -> Outcome:
        """Rotate the credential of one identity.

        ``secrets`` is an already-listed vault snapshot; when omitted the vault is
        listed fresh. Never raises for rotation errors; they become a failed Outcome.
        """
        state = RotationState.DISCOVERING
        try:
            if secrets is None:
                secrets = await self.catalog.list_all()
            match = find_by_identity(identity_id, secrets, tag_name=self.tag_name)
        except RotationError as e:
            return self._fail(identity_id, state, e)

        if match is None:
            self.log.info(
                "No secret in the vault belongs to identity '%s'; rotation skipped. "
                "Add a secret tagged '%s' to start rotation.",
                identity_id,
                self.tag_name,
            )
            return Outcome(identity_id, OutcomeStatus.SKIPPED, RotationState.SKIPPED)

        state = RotationState.FOUND
        try:
            identity = await self.directory.get_identity(identity_id)
        except NotFoundError as e:
            self.log.info("No application found by id '%s'; rotation skipped", identity_id)
            return Outcome(
                identity_id,
                OutcomeStatus.SKIPPED,
                RotationState.SKIPPED,
                reason=FailureReason.NOT_FOUND,
                secret_name=match.name,
                detail=e.message,
            )
        except RotationError as e:
            return self._fail(identity_id, state, e, secret_name=match.name)

        state = RotationState.GENERATING
        self.log.debug("Generate a new secret")
        value = self._generate()

        state = RotationState.NAMING
        name = allocate_name(identity.credential_names, self.credential_base_name)

        state = RotationState.PROVISIONING
        try:
            await self.provisioner.add_credential(
                identity, name, value, self._clock(), self.credential_duration
            )
        except RotationError as e:
            return self._fail(identity_id, state, e, secret_name=match.name, credential_name=name)

        state = RotationState.PERSISTING
        try:
            await self.persister.persist(match.name, value, match.tags)
        except RotationError as e:
            self.log.warning(
                "Credential '%s' is active on identity '%s' but secret '%s' still holds the "
                "previous value; re-run rotation to publish a fresh one",
                name,
                identity_id,
                match.name,
            )
            return self._fail(
                identity_id,
                state,
                e,
                secret_name=match.name,
                credential_name=name,
            )

        return Outcome(
            identity_id,
            OutcomeStatus.COMPLETED,
            RotationState.COMPLETED,
            secret_name=match.name,
            credential_name=name,
        )

    async def rotate_all(self) -> AggregateOutcome:
        """Rotate every identity referenced by a tagged secret.

        Identities are processed sequentially; one failure never stops the rest.
        Raises VaultError only if the initial listing fails.
        """
        secrets = await self.catalog.list_all()
        identity_ids = tagged_identity_ids(secrets, tag_name=self.tag_name)
        self.log.info("Rotating credentials for %d tagged identities", len(identity_ids))

        result = AggregateOutcome()
        for identity_id in identity_ids:
            try:
                outcome = await self.rotate(identity_id, secrets=secrets)
            except Exception as e:
                self.log.exception("Unexpected error rotating identity '%s'", identity_id)
                outcome = Outcome(
                    identity_id,
                    OutcomeStatus.FAILED,
                    RotationState.FAILED,
                    reason=FailureReason.UNEXPECTED,
                    detail=str(e),
                )
            result.add(outcome)

        self.log.info(
            "Rotation finished: %d completed, %d skipped, %d failed",
            len(result.completed),
            len(result.skipped),
            len(result.failed),
        )
        return result


def build_engine(
    config: RotatorConfig, *, logger: logging.Logger | None = None
) -> tuple[RotationEngine, list[KeyVaultClient | DirectoryClient]]:
    """Wire an engine to REST clients. The caller closes the returned clients."""
    vault = KeyVaultClient(
        config.require_vault_url(),
        token=config.vault_token,
        api_version=config.vault_api_version,
        timeout=config.http_timeout,
    )
    directory = DirectoryClient(
        config.directory_url, token=config.directory_token, timeout=config.http_timeout
    )
    engine = RotationEngine(
        SecretCatalog(vault),
        directory,
        CredentialProvisioner(directory),
        SecretPersister(vault),
        logger=logger,
        tag_name=config.tag_name,
        credential_base_name=config.credential_base_name,
        credential_duration=config.credential_duration,
    )
    return engine, [vault, directory]
