"""Unit tests for auth/store.py -- AccountStore lookups.

Covers:
- create_account() stores a lowercase email and returns a UUID identifier
- get_by_email() is case-insensitive
- get_by_id() / get_by_email() return None for unknown keys
- duplicate emails differing only by case are rejected
- AccountStore plugs into AccountService as its lookup
"""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import AuthenticationRequest
from auth.passwords import PasswordHasher
from auth.service import AccountService
from auth.store import AccountStore


def test_create_and_fetch_by_id(account_store: AccountStore) -> None:
    account_id = account_store.create_account("Someone@Example.COM", "PBKDF2WithHmacSHA256:1:256:YQ:YQ")
    uuid.UUID(account_id)
    record = account_store.get_by_id(account_id)
    assert record is not None
    assert record.email_address == "someone@example.com"
    assert record.password_hash == "PBKDF2WithHmacSHA256:1:256:YQ:YQ"
    assert record.created_at


def test_get_by_email_is_case_insensitive(account_store: AccountStore) -> None:
    account_id = account_store.create_account("foo@example.com", "h")
    for query in ("foo@example.com", "Foo@Example.com", "  FOO@EXAMPLE.COM "):
        record = account_store.get_by_email(query)
        assert record is not None and record.account_id == account_id


def test_unknown_keys_return_none(account_store: AccountStore) -> None:
    assert account_store.get_by_id(str(uuid.uuid4())) is None
    assert account_store.get_by_email("nobody@example.com") is None


def test_duplicate_email_rejected(account_store: AccountStore) -> None:
    account_store.create_account("dup@example.com", "h")
    with pytest.raises(IntegrityError):
        account_store.create_account("DUP@example.com", "h")


def test_has_accounts(account_store: AccountStore) -> None:
    assert account_store.has_accounts() is False
    account_store.create_account("one@example.com", "h")
    assert account_store.has_accounts() is True


def test_service_over_store(account_store: AccountStore, fast_hasher: PasswordHasher) -> None:
    """Case-insensitive login end to end: stored lowercase, submitted mixed case."""
    account_id = account_store.create_account("foo@example.com", fast_hasher.hash_password("pw"))
    service = AccountService(fast_hasher, account_store)
    token = service.authenticate_account(AuthenticationRequest("Foo@Example.com", "pw"))
    assert token.account_id == account_id
    assert service.find_account_by_id(account_id).email_address == "foo@example.com"
