"""
auth/models.py -- Domain dataclasses for credential verification.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work; these only own the shape.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CredentialRecord:
    """A stored account as seen by the authenticator (read-only).

    email_address is always lowercase -- the store normalizes on write and
    lookups normalize on read, which makes login case-insensitive.
    password_hash is the self-describing encoding produced by PasswordHasher.
    """

    account_id: str
    email_address: str
    password_hash: str
    created_at: str | None = None


@dataclass
class AuthenticationRequest:
    """Raw login input. Either field may be None, empty or untrimmed."""

    email_address: str | None = None
    password: str | None = None

    def __repr__(self) -> str:
        # Keep the plaintext out of tracebacks and debug logs.
        return f"AuthenticationRequest(email_address={self.email_address!r}, password='***')"


@dataclass(frozen=True)
class IdentityToken:
    """Proof of a successful authentication, valid until expiration (UTC).

    Never persisted. auth/tokens.py turns it into a signed JWT for transport.
    """

    account_id: str
    expiration: datetime
