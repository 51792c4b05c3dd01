"""
auth/exceptions.py -- Typed failures raised by the credential subsystem.

Two families:
  Expected outcomes (AccountError subclasses): the caller renders these
      directly to the end user. Each carries the HTTP status it maps to.
  Integrity faults (ConfigurationError, MalformedHashError): unexpected.
      They abort the operation and are logged server-side only.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations


class AccountError(Exception):
    """Base class for user-facing account failures."""

    status_code: int = 400


class ValidationError(AccountError):
    """One or more required request fields were missing or empty.

    field_errors maps the request field name to its user-facing message so a
    client can highlight exactly which inputs need fixing.
    """

    status_code = 422

    def __init__(self, field_errors: dict[str, str]) -> None:
        super().__init__("; ".join(field_errors.values()))
        self.field_errors = dict(field_errors)


class AuthenticationError(AccountError):
    """Credentials did not match an account.

    Raised with the same message whether the account is unknown or the
    password is wrong.
    """

    status_code = 401

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ValueError):
    """The configured hashing parameters cannot be used (fatal at startup)."""


class MalformedHashError(ValueError):
    """A stored password hash is not a well-formed encoding (data corruption)."""
