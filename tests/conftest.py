"""
tests/conftest.py -- Shared test fixtures for credgate.

This module provides:
  - make_hasher / fast_hasher: PasswordHasher with a tiny work factor so tests run quickly
  - make_lookup: list-backed AccountLookup for pure service tests
  - account_store: isolated in-memory AccountStore
  - api_client: TestClient wired to a seeded store through a patched lifespan

Design: Named shared-memory SQLite URIs (not plain :memory:) are used for the
API client because route handlers run key derivation on worker threads. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread.

The DEBUG env var must be set before any auth module import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: Set DEBUG before any auth/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import anyio
import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.models import CredentialRecord
from auth.passwords import HasherConfig, PasswordHasher
from auth.service import AccountService
from auth.store import AccountStore

# ---------------------------------------------------------------------------
# Hasher helpers
# ---------------------------------------------------------------------------


def _fast_hasher(iterations: int = 1_000, algorithm: str = "PBKDF2WithHmacSHA256") -> PasswordHasher:
    return PasswordHasher(
        HasherConfig.with_algorithm(algorithm, iterations=iterations, salt_length=16, key_length=256)
    )


@pytest.fixture
def make_hasher() -> Callable[..., PasswordHasher]:
    """Factory for hashers with a test-sized work factor. Production defaults take ~1s per hash.

    Call as make_hasher(iterations=500, algorithm="PBKDF2WithHmacSHA1").
    """
    return _fast_hasher


@pytest.fixture
def fast_hasher(make_hasher: Callable[..., PasswordHasher]) -> PasswordHasher:
    return make_hasher()


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------


@dataclass
class _InMemoryLookup:
    """AccountLookup backed by a list of records. Records every email queried."""

    records: list[CredentialRecord]

    def __post_init__(self) -> None:
        self.email_queries: list[str] = []
        self.id_queries: list[str] = []

    def get_by_id(self, account_id: str) -> CredentialRecord | None:
        self.id_queries.append(account_id)
        return next((r for r in self.records if r.account_id == account_id), None)

    def get_by_email(self, email_address: str) -> CredentialRecord | None:
        self.email_queries.append(email_address)
        return next((r for r in self.records if r.email_address == email_address), None)


@pytest.fixture
def make_lookup() -> Callable[[list[CredentialRecord]], _InMemoryLookup]:
    """Factory for an AccountLookup over the given records.

    The returned lookup records every query in .email_queries and .id_queries.
    """
    return _InMemoryLookup


@pytest.fixture
def account_store() -> Generator[AccountStore, None, None]:
    store = AccountStore("sqlite:///:memory:")
    yield store
    store.close()


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


def _patch_lifespan(store: AccountStore, service: AccountService):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-seeded test store and a fast-hasher service into app.state
    so routes never touch the production database or the production work factor.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.account_store = store
        app.state.account_service = service
        app.state.hash_limiter = anyio.CapacityLimiter(2)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, str], None, None]:
    """Yield (client, account_id) for API integration tests.

    Seeded accounts:
      user@test.com    password "correct"
      broken@test.com  stored hash is corrupt ("not-a-valid-hash")

    Rate limiting is disabled so the number of login calls across tests does
    not matter; tests that exercise the limiter enable it themselves.
    """
    store = AccountStore("sqlite:///file:test_accounts_api?mode=memory&cache=shared&uri=true")
    hasher = _fast_hasher()
    account_id = store.create_account("user@test.com", hasher.hash_password("correct"))
    store.create_account("broken@test.com", "not-a-valid-hash")
    service = AccountService(hasher, store)

    app.router.lifespan_context = _patch_lifespan(store, service)
    limiter.enabled = False

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, account_id

    limiter.enabled = True
    store.close()
