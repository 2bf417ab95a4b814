"""Token endpoint schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field


class TokenOut(BaseModel):
    """RFC 6749 section 5.1 token response."""
    token_type: str = "Bearer"
    expires_in: int = Field(..., ge=0)
    access_token: str
    refresh_token: str | None = None


class OAuthErrorOut(BaseModel):
    """RFC 6749 section 5.2 error response."""
    error: str
    error_description: str
    hint: str | None = None


class GrantTypesOut(BaseModel):
    grant_types: list[str]
