"""
API request and response models for credgate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

JSON keys are camelCase (emailAddress, authenticationToken, ...) via
alias_generator; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class AuthenticateRequest(BaseModel):
    """Request body for POST /api/v1/accounts/authenticate.

    Both fields are optional at this layer: missing or blank values are
    reported by AccountService as field errors, all at once, rather than by
    Pydantic one field at a time. max_length bounds the key-derivation input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email_address: Optional[str] = Field(default=None, max_length=320)
    password: Optional[str] = Field(default=None, max_length=1024)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class AuthenticateResponse(BaseModel):
    """Response for a successful POST /api/v1/accounts/authenticate."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    authentication_token: str
    account_id: str
    expires_at: datetime


class AccountResponse(BaseModel):
    """Response for GET /api/v1/accounts/me. Never includes the password hash."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    account_id: str
    email_address: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload.

    field_errors is only present on validation failures and maps each request
    field to its message.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    code: str
    message: str
    detail: Optional[str] = None
    field_errors: Optional[dict[str, str]] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail

    def to_content(self) -> dict:
        """Serialize with camelCase keys, omitting unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
