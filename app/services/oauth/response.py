"""Bearer token response assembled by grants and serialized by the API layer."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from app.core.security import encode_access_token, encode_refresh_token
from app.services.oauth.entities import AccessTokenEntity, RefreshTokenEntity


class BearerTokenResponse:
    def __init__(self) -> None:
        self.access_token: AccessTokenEntity | None = None
        self.refresh_token: RefreshTokenEntity | None = None

    def set_access_token(self, token: AccessTokenEntity) -> None:
        self.access_token = token

    def set_refresh_token(self, token: RefreshTokenEntity) -> None:
        self.refresh_token = token

    def to_dict(self) -> dict[str, Any]:
        if self.access_token is None:
            raise RuntimeError("No access token attached to the response")
        expires_in = int((self.access_token.expires_at - datetime.now(timezone.utc)).total_seconds())
        payload: dict[str, Any] = {
            "token_type": "Bearer",
            "expires_in": max(expires_in, 0),
            "access_token": encode_access_token(self.access_token),
        }
        if self.refresh_token is not None:
            payload["refresh_token"] = encode_refresh_token(self.refresh_token)
        return payload
