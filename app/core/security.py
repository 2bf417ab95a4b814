from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

import jwt
from jwt import ExpiredSignatureError
from jwt import InvalidTokenError as PyJWTInvalidTokenError
from passlib.context import CryptContext

from app.core.config import settings

if TYPE_CHECKING:
    from app.services.oauth.entities import AccessTokenEntity, RefreshTokenEntity


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__truncate_error=True,
)

ALGORITHM = "HS256"


class TokenValidationError(Exception):
    """Raised when a token cannot be validated."""


class TokenExpiredError(TokenValidationError):
    """Raised when a token is expired."""


def hash_client_secret(secret: str) -> str:
    return pwd_context.hash(secret)


def verify_client_secret(secret: str, hashed: str) -> bool:
    return pwd_context.verify(secret, hashed)


def encode_access_token(token: AccessTokenEntity) -> str:
    """Sign an issued access token as a bearer JWT."""
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "jti": token.identifier,
        "aud": token.client.identifier,
        "sub": str(token.user_identifier) if token.user_identifier is not None else "",
        "scopes": token.scope_names,
        "iat": now,
        "nbf": now,
        "exp": token.expires_at,
        "type": TokenType.ACCESS.value,
    }
    if settings.JWT_ISSUER:
        payload["iss"] = settings.JWT_ISSUER
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def encode_refresh_token(token: RefreshTokenEntity) -> str:
    """Sign a refresh token bound to its access token."""
    access = token.access_token
    payload: dict[str, Any] = {
        "jti": token.identifier,
        "access_token_id": access.identifier,
        "client_id": access.client.identifier,
        "sub": str(access.user_identifier) if access.user_identifier is not None else "",
        "scopes": access.scope_names,
        "iat": datetime.now(timezone.utc),
        "exp": token.expires_at,
        "type": TokenType.REFRESH.value,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def decode_token(
    token: str,
    expected_type: TokenType = TokenType.ACCESS,
    audience: str | None = None,
) -> dict[str, Any]:
    options = {"verify_aud": audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=audience,
            options=options,
        )
    except ExpiredSignatureError as exc:
        raise TokenExpiredError("Token has expired") from exc
    except PyJWTInvalidTokenError as exc:
        raise TokenValidationError("Token is invalid") from exc
    token_type = payload.get("type", TokenType.ACCESS.value)
    if token_type != expected_type.value:
        raise TokenValidationError("Token type mismatch")
    return payload
