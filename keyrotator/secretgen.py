"""Random secret values for new credentials."""

from __future__ import annotations

import base64
import secrets

SECRET_BYTES = 32


def generate_secret_value() -> str:
    """Return 32 bytes from the OS CSPRNG, base64 encoded (44 characters)."""
    return base64.b64encode(secrets.token_bytes(SECRET_BYTES)).decode("ascii")
