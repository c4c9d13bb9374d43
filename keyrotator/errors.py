"""
Error taxonomy for rotation.

Every error is scoped to a single identity. The engine turns them into an
Outcome; only the CLI and rotate_all's listing step let them escape.
"""

from __future__ import annotations


class RotationError(Exception):
    """Base class. ``payload`` holds the provider's diagnostic body, if any."""

    def __init__(self, message: str, payload: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload


class NotFoundError(RotationError):
    pass


class AmbiguousMatchError(RotationError):
    """More than one secret is tagged with the same identity id."""

    def __init__(self, identity_id: str, secret_names: list[str]) -> None:
        super().__init__(
            f"{len(secret_names)} secrets tagged for identity '{identity_id}': "
            f"{', '.join(secret_names)}"
        )
        self.identity_id = identity_id
        self.secret_names = secret_names


class ForbiddenError(RotationError):
    pass


class ProviderError(RotationError):
    pass


class VaultError(RotationError):
    pass


class ConfigurationError(Exception):
    pass
