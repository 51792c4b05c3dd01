"""
api/routes/v1/accounts.py -- Account authentication REST endpoints.

Routes:
  POST /api/v1/accounts/authenticate   -- email/password login; returns a JWT
  GET  /api/v1/accounts/me             -- current account info (requires auth)

Security:
  [H2] POST /authenticate is rate-limited per IP (Settings.login_rate_limit).
  [C1] Unknown email and wrong password share one generic 401 message; see
       AccountService.authenticate_account.
  [M5] Cache-Control: no-store on authenticate responses.

Concurrency:
  Key derivation is deliberately slow. authenticate() runs it on a worker
  thread capped by app.state.hash_limiter so a burst of logins cannot exhaust
  the thread pool used by every other route.
"""

from __future__ import annotations

import anyio
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import AccountResponse, AuthenticateRequest, AuthenticateResponse
from auth.dependencies import get_current_account
from auth.models import AuthenticationRequest, CredentialRecord
from auth.service import AccountService
from auth.tokens import encode_identity_token
from core.config import get_settings

# Auth policy:
# - POST /api/v1/accounts/authenticate: public -- login endpoint must be unauthenticated
# - GET  /api/v1/accounts/me:           requires auth (get_current_account)
router = APIRouter()


def _login_rate_limit() -> str:
    return get_settings().login_rate_limit


@router.post("/accounts/authenticate", response_model=AuthenticateResponse)
@limiter.limit(_login_rate_limit)  # [H2] must sit BELOW @router so the registered endpoint is the limited one
async def authenticate(request: Request, body: AuthenticateRequest) -> JSONResponse:
    """Authenticate with email address and password; return a signed JWT.

    ValidationError (422) and AuthenticationError (401) raised by the service
    are rendered by the exception handlers in api/main.py.
    """
    account_service: AccountService = request.app.state.account_service
    identity = await anyio.to_thread.run_sync(
        account_service.authenticate_account,
        AuthenticationRequest(email_address=body.email_address, password=body.password),
        limiter=request.app.state.hash_limiter,
    )
    resp = JSONResponse(
        status_code=200,
        content=AuthenticateResponse(
            authentication_token=encode_identity_token(identity),
            account_id=identity.account_id,
            expires_at=identity.expiration,
        ).model_dump(by_alias=True, mode="json"),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.get("/accounts/me", response_model=AccountResponse)
async def me(account: CredentialRecord = Depends(get_current_account)) -> JSONResponse:
    """Return the authenticated account's identifier and email address."""
    return JSONResponse(
        content=AccountResponse(
            account_id=account.account_id,
            email_address=account.email_address,
        ).model_dump(by_alias=True)
    )
