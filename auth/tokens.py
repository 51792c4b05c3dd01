"""
auth/tokens.py -- JWT transport for IdentityToken.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       the account id (sub) and expiry (exp) taken straight from the
       IdentityToken. Decoding returns None on any failure -- the route layer
       turns that into a 401.

  SECRET_KEY: sourced from core.config.get_settings(). The Settings class
       validates the key at startup [M6].

Layer rule: no imports from api/. Import from core/ is allowed -- core/ is the
kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from jose import JWTError, jwt

from auth.models import IdentityToken
from core.config import get_settings

logger = logging.getLogger("credgate.auth")

_ALGORITHM = "HS256"


def encode_identity_token(token: IdentityToken, secret_key: str | None = None) -> str:
    """Sign an IdentityToken as a compact JWT.

    secret_key defaults to Settings.secret_key; tests may pass their own.
    """
    payload = {
        "sub": token.account_id,
        "exp": token.expiration,
    }
    return jwt.encode(payload, secret_key or get_settings().secret_key, algorithm=_ALGORITHM)


def decode_identity_token(value: str, secret_key: str | None = None) -> IdentityToken | None:
    """Verify a JWT and return the IdentityToken it carries, or None on any failure.

    Expired tokens, bad signatures and tokens without sub/exp all yield None.
    """
    try:
        payload = jwt.decode(value, secret_key or get_settings().secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    account_id = payload.get("sub")
    exp = payload.get("exp")
    if not isinstance(account_id, str) or not account_id or not isinstance(exp, (int, float)):
        logger.debug("Rejected token with missing claims")
        return None
    return IdentityToken(account_id=account_id, expiration=datetime.fromtimestamp(exp, tz=timezone.utc))
