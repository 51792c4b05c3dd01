"""
tests/test_config.py -- Settings validation in core/config.py.

Covers:
  - defaults match the documented hash parameters and token lifetime
  - production mode refuses to start without SECRET_KEY
  - short SECRET_KEY is rejected in every mode
  - hash parameters come from the environment
"""

from __future__ import annotations

import pydantic
import pytest

from core.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.delenv("SECRET_KEY", raising=False)
    settings = Settings(_env_file=None)
    assert settings.hash_algorithm == "PBKDF2WithHmacSHA512"
    assert settings.hash_iterations == 210_000
    assert settings.hash_salt_length == 64
    assert settings.hash_key_length == 2048
    assert settings.token_expire_minutes == 60
    assert len(settings.secret_key) >= 32


def test_production_requires_secret_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.delenv("SECRET_KEY", raising=False)
    with pytest.raises(pydantic.ValidationError, match="SECRET_KEY is required"):
        Settings(_env_file=None)


def test_short_secret_key_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("SECRET_KEY", "short")
    with pytest.raises(pydantic.ValidationError, match="at least 32 characters"):
        Settings(_env_file=None)


def test_hash_parameters_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("HASH_ALGORITHM", "PBKDF2WithHmacSHA256")
    monkeypatch.setenv("HASH_ITERATIONS", "600000")
    settings = Settings(_env_file=None)
    assert settings.hash_algorithm == "PBKDF2WithHmacSHA256"
    assert settings.hash_iterations == 600_000


def test_non_positive_iterations_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("HASH_ITERATIONS", "0")
    with pytest.raises(pydantic.ValidationError):
        Settings(_env_file=None)
