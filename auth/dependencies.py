"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The token is read from the Authorization: Bearer <token> header.

try_get_current_account() is the soft variant (returns None on failure).
get_current_account() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: auth/dependencies.py may import from fastapi (for
HTTPException/Request) because this module is part of the FastAPI dependency
injection system. It does not import from api/.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import CredentialRecord
from auth.service import AccountService
from auth.tokens import decode_identity_token


def _extract_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:] or None
    return None


def try_get_current_account(request: Request) -> CredentialRecord | None:
    """Resolve the account behind the request's JWT, or None. Never raises."""
    token = _extract_token(request)
    if not token:
        return None
    identity = decode_identity_token(token)
    if identity is None:
        return None
    account_service: AccountService = request.app.state.account_service
    return account_service.find_account_by_id(identity.account_id)


def get_current_account(request: Request) -> CredentialRecord:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(account: CredentialRecord = Depends(get_current_account)): ...
    """
    account = try_get_current_account(request)
    if account is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return account
