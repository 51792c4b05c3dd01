"""
tests/test_tokens.py -- JWT encode/decode of IdentityToken.

Covers:
  - round trip preserves account id and expiration (second precision)
  - expired, tampered, wrongly keyed and claim-less tokens decode to None
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import jwt

from auth.models import IdentityToken
from auth.tokens import decode_identity_token, encode_identity_token

KEY = "k" * 40


def _token(minutes: int = 60) -> IdentityToken:
    expiration = (datetime.now(timezone.utc) + timedelta(minutes=minutes)).replace(microsecond=0)
    return IdentityToken(account_id="acct-1", expiration=expiration)


def test_round_trip() -> None:
    original = _token()
    decoded = decode_identity_token(encode_identity_token(original, KEY), KEY)
    assert decoded == original


def test_default_key_from_settings() -> None:
    original = _token()
    assert decode_identity_token(encode_identity_token(original)) == original


def test_expired_token() -> None:
    assert decode_identity_token(encode_identity_token(_token(minutes=-5), KEY), KEY) is None


def test_wrong_key() -> None:
    assert decode_identity_token(encode_identity_token(_token(), KEY), "x" * 40) is None


def test_tampered_token() -> None:
    value = encode_identity_token(_token(), KEY)
    header, payload, signature = value.split(".")
    tampered = ".".join([header, payload, signature[:-2] + ("AA" if signature[-2:] != "AA" else "BB")])
    assert decode_identity_token(tampered, KEY) is None


def test_garbage() -> None:
    assert decode_identity_token("not.a.jwt", KEY) is None
    assert decode_identity_token("", KEY) is None


def test_missing_subject() -> None:
    value = jwt.encode({"exp": _token().expiration}, KEY, algorithm="HS256")
    assert decode_identity_token(value, KEY) is None
