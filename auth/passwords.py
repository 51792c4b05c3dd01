"""
auth/passwords.py -- Salted, iterated PBKDF2 password hashing.

Encoded form (one opaque string column in the store):

    <algorithm>:<iterations>:<key length in bits>:<salt b64>:<hash b64>

e.g. PBKDF2WithHmacSHA512:210000:2048:<salt>:<hash>

Security design decisions:
  Self-describing encoding: verify_password() re-derives with the algorithm,
      iteration count and key length embedded in the stored string, never with
      the configured defaults. Raising the work factor therefore only affects
      new hashes; old ones keep verifying until needs_rehash() flags them.

  Constant-time comparison: hmac.compare_digest() so a mismatch does not
      return earlier for a wrong first byte than for a wrong last byte.

  Base64: standard alphabet, padding stripped. Neither '+', '/' nor any
      alphanumeric collides with the ':' delimiter.

  Corrupt input: a stored hash that does not parse is a data-integrity fault,
      not a wrong password. MalformedHashError propagates to the caller.

PasswordHasher holds only a frozen HasherConfig, so one instance is shared by
every request thread without locking.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

from auth.exceptions import ConfigurationError, MalformedHashError

if TYPE_CHECKING:
    from core.config import Settings

DEFAULT_ITERATIONS = 210_000  # OWASP 2023 recommendation
DEFAULT_SALT_LENGTH = 64  # bytes
DEFAULT_KEY_LENGTH = 128 * 16  # bits

# Identifier stored in the encoding -> hashlib digest name.
_ALGORITHMS: dict[str, str] = {
    "PBKDF2WithHmacSHA1": "sha1",
    "PBKDF2WithHmacSHA224": "sha224",
    "PBKDF2WithHmacSHA256": "sha256",
    "PBKDF2WithHmacSHA384": "sha384",
    "PBKDF2WithHmacSHA512": "sha512",
}


def supported_algorithms() -> list[str]:
    """Return the algorithm identifiers this module can hash and verify."""
    return sorted(_ALGORITHMS)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HasherConfig:
    """Immutable parameters for newly created hashes.

    Validated on construction, so a typo in the algorithm name fails at
    startup rather than on the first login.
    """

    algorithm: str
    iterations: int = DEFAULT_ITERATIONS
    salt_length: int = DEFAULT_SALT_LENGTH
    key_length: int = DEFAULT_KEY_LENGTH
    # Salt source. Must be a CSPRNG; overridable for deterministic tests.
    random_bytes: Callable[[int], bytes] = field(default=secrets.token_bytes, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.algorithm not in _ALGORITHMS:
            raise ConfigurationError(
                f"Unsupported hash algorithm {self.algorithm!r}. Expected one of: {', '.join(supported_algorithms())}"
            )
        for name in ("iterations", "salt_length", "key_length"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        if self.key_length % 8:
            raise ConfigurationError(f"key_length is in bits and must be a multiple of 8, got {self.key_length}")

    @classmethod
    def with_algorithm(
        cls,
        algorithm: str,
        *,
        iterations: int | None = None,
        salt_length: int | None = None,
        key_length: int | None = None,
        random_bytes: Callable[[int], bytes] | None = None,
    ) -> "HasherConfig":
        """Build a config where every omitted (or None) option takes its default."""
        return cls(
            algorithm=algorithm,
            iterations=DEFAULT_ITERATIONS if iterations is None else iterations,
            salt_length=DEFAULT_SALT_LENGTH if salt_length is None else salt_length,
            key_length=DEFAULT_KEY_LENGTH if key_length is None else key_length,
            random_bytes=secrets.token_bytes if random_bytes is None else random_bytes,
        )


# ---------------------------------------------------------------------------
# Encoding helpers
# ---------------------------------------------------------------------------


class _ParsedHash(NamedTuple):
    algorithm: str
    iterations: int
    key_length: int
    salt: bytes
    digest: bytes


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(value: str, label: str) -> bytes:
    try:
        return base64.b64decode(value + "=" * (-len(value) % 4), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedHashError(f"Invalid base64 in {label} field") from exc


def _parse_positive_int(value: str, label: str) -> int:
    if not (value.isascii() and value.isdigit()) or int(value) <= 0:
        raise MalformedHashError(f"{label} field must be a positive integer")
    return int(value)


def _parse(encoded_hash: str) -> _ParsedHash:
    fields = encoded_hash.split(":")
    if len(fields) != 5:
        raise MalformedHashError(f"Expected 5 colon-delimited fields, found {len(fields)}")
    algorithm, iterations, key_length, salt, digest = fields
    if algorithm not in _ALGORITHMS:
        raise MalformedHashError(f"Unknown hash algorithm {algorithm!r}")
    parsed = _ParsedHash(
        algorithm=algorithm,
        iterations=_parse_positive_int(iterations, "iterations"),
        key_length=_parse_positive_int(key_length, "key length"),
        salt=_b64decode(salt, "salt"),
        digest=_b64decode(digest, "hash"),
    )
    if parsed.key_length % 8 or len(parsed.digest) * 8 != parsed.key_length:
        raise MalformedHashError("Hash length does not match the declared key length")
    if not parsed.salt:
        raise MalformedHashError("Salt field is empty")
    return parsed


def _derive(algorithm: str, plaintext: str, salt: bytes, iterations: int, key_length: int) -> bytes:
    return hashlib.pbkdf2_hmac(
        _ALGORITHMS[algorithm],
        plaintext.encode("utf-8", "surrogatepass"),
        salt,
        iterations,
        dklen=key_length // 8,
    )


def _require_str(value: object, name: str) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")


# ---------------------------------------------------------------------------
# Hasher
# ---------------------------------------------------------------------------


class PasswordHasher:
    """Hash and verify passwords using the self-describing PBKDF2 encoding.

    Usage:
        hasher = PasswordHasher(HasherConfig.with_algorithm("PBKDF2WithHmacSHA512"))
        stored = hasher.hash_password("correct horse")
        hasher.verify_password("correct horse", stored)  # True
    """

    def __init__(self, config: HasherConfig) -> None:
        self._config = config

    @property
    def config(self) -> HasherConfig:
        return self._config

    def hash_password(self, plaintext: str) -> str:
        """Return the encoded hash of plaintext using a fresh random salt.

        Empty strings are hashed like any other input; password policy is
        enforced elsewhere.
        """
        _require_str(plaintext, "plaintext")
        cfg = self._config
        salt = cfg.random_bytes(cfg.salt_length)
        digest = _derive(cfg.algorithm, plaintext, salt, cfg.iterations, cfg.key_length)
        return f"{cfg.algorithm}:{cfg.iterations}:{cfg.key_length}:{_b64encode(salt)}:{_b64encode(digest)}"

    def verify_password(self, plaintext: str, encoded_hash: str) -> bool:
        """Return True if plaintext produces the hash embedded in encoded_hash.

        Raises MalformedHashError if encoded_hash does not parse.
        """
        _require_str(plaintext, "plaintext")
        _require_str(encoded_hash, "encoded_hash")
        parsed = _parse(encoded_hash)
        candidate = _derive(parsed.algorithm, plaintext, parsed.salt, parsed.iterations, parsed.key_length)
        return hmac.compare_digest(candidate, parsed.digest)

    def needs_rehash(self, encoded_hash: str) -> bool:
        """Return True if encoded_hash was produced with different parameters than the current config.

        Callers can re-hash on the next successful login to migrate stored
        hashes to a stronger work factor.
        """
        _require_str(encoded_hash, "encoded_hash")
        parsed = _parse(encoded_hash)
        cfg = self._config
        return (
            parsed.algorithm != cfg.algorithm
            or parsed.iterations != cfg.iterations
            or parsed.key_length != cfg.key_length
            or len(parsed.salt) != cfg.salt_length
        )


def build_password_hasher(settings: Settings) -> PasswordHasher:
    """Construct the shared PasswordHasher from application settings.

    Raises ConfigurationError when the configured parameters are unusable.
    Called once during startup so misconfiguration stops the process early.
    """
    return PasswordHasher(
        HasherConfig.with_algorithm(
            settings.hash_algorithm,
            iterations=settings.hash_iterations,
            salt_length=settings.hash_salt_length,
            key_length=settings.hash_key_length,
        )
    )
