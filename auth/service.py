"""
auth/service.py -- Account authentication.

AccountService validates a login request, looks the account up through an
injected AccountLookup, delegates the hash comparison to PasswordHasher and
issues an IdentityToken on success.

Security design decisions:
  Generic failure [C1]: an unknown email and a wrong password raise the same
      AuthenticationError with the same message, so the response never reveals
      which email addresses are registered.

  Timing equalization [C1]: when no account matches, the password is still
      verified against a dummy hash computed at construction with the current
      parameters, so an unknown email costs as much as a wrong password.

  No secrets in logs: only account ids and generic outcomes are logged.

All collaborators arrive through the constructor. The service holds no
mutable state, so a single instance serves every request thread.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Protocol

from auth.exceptions import AuthenticationError, ValidationError
from auth.models import AuthenticationRequest, CredentialRecord, IdentityToken
from auth.passwords import PasswordHasher

logger = logging.getLogger("credgate.auth")

DEFAULT_TOKEN_LIFETIME = timedelta(minutes=60)


class AccountLookup(Protocol):
    """Read-only access to stored credential records."""

    def get_by_id(self, account_id: str) -> CredentialRecord | None: ...

    def get_by_email(self, email_address: str) -> CredentialRecord | None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _identity(message: str) -> str:
    return message


class AccountService:
    """Authenticate accounts and resolve them by identifier.

    Args:
        password_hasher: Shared PasswordHasher used to check stored hashes.
        account_lookup:  Anything implementing AccountLookup (e.g. AccountStore).
        translate:       Maps a user-facing message to the caller's locale.
                         Defaults to returning the message unchanged.
        token_lifetime:  How long an issued IdentityToken stays valid.
        clock:           Returns the current aware UTC datetime. Injected by tests.
    """

    def __init__(
        self,
        password_hasher: PasswordHasher,
        account_lookup: AccountLookup,
        translate: Callable[[str], str] | None = None,
        token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if token_lifetime <= timedelta(0):
            raise ValueError("token_lifetime must be positive")
        self._password_hasher = password_hasher
        self._account_lookup = account_lookup
        self._translate = translate or _identity
        self._token_lifetime = token_lifetime
        self._clock = clock or _utcnow
        self._dummy_hash = password_hasher.hash_password(secrets.token_urlsafe(16))

    def find_account_by_id(self, account_id: str | None) -> CredentialRecord | None:
        """Return the account for account_id, or None if absent or account_id is empty."""
        if not account_id:
            return None
        return self._account_lookup.get_by_id(account_id)

    def authenticate_account(self, request: AuthenticationRequest) -> IdentityToken:
        """Check the request's credentials and issue an IdentityToken.

        Raises:
            ValidationError:     email and/or password missing (all missing
                                 fields reported together).
            AuthenticationError: no matching account, or wrong password.
            MalformedHashError:  the stored hash for the account is corrupt.
        """
        email_address = (request.email_address or "").strip()
        password = (request.password or "").strip()

        field_errors: dict[str, str] = {}
        if not email_address:
            field_errors["emailAddress"] = self._translate("Email address is required.")
        if not password:
            field_errors["password"] = self._translate("Password is required.")
        if field_errors:
            raise ValidationError(field_errors)

        account = self._account_lookup.get_by_email(email_address.lower())

        if account is None:
            # Equalize timing -- do NOT return early before deriving a key [C1]
            self._password_hasher.verify_password(password, self._dummy_hash)
            matched = False
        else:
            matched = self._password_hasher.verify_password(password, account.password_hash)

        # Reject if no account, or account's hashed password does not match
        if not matched:
            logger.warning("Authentication failed")
            raise AuthenticationError(self._translate("Sorry, we could not authenticate you."))

        expiration = self._clock() + self._token_lifetime
        logger.info("Authenticated account %s", account.account_id)
        return IdentityToken(account_id=account.account_id, expiration=expiration)
