"""OAuth 2.0 token endpoint engine.

A small authorization server that dispatches token requests to grants by
``grant_type``. Grants are composed from explicit capabilities (client and
scope repositories, a token issuer, an event emitter) rather than a shared
base class.

Grants:
- google_access_token (Google access token -> local access/refresh tokens)
"""
from .entities import (
    AccessTokenEntity,
    ClientEntity,
    RefreshTokenEntity,
    ScopeEntity,
    UserIdentity,
)
from .events import EventEmitter, LoginEvent, RequestEvent, create_event_emitter
from .grants import GOOGLE_ACCESS_TOKEN, GoogleAccessTokenGrant
from .issuer import CalendarMonthTTL, TokenIssuer
from .request import TokenRequest
from .response import BearerTokenResponse
from .server import AuthorizationServer

__all__ = [
    # Entities
    "AccessTokenEntity",
    "ClientEntity",
    "RefreshTokenEntity",
    "ScopeEntity",
    "UserIdentity",
    # Events
    "EventEmitter",
    "LoginEvent",
    "RequestEvent",
    "create_event_emitter",
    # Grants
    "GOOGLE_ACCESS_TOKEN",
    "GoogleAccessTokenGrant",
    # Engine
    "AuthorizationServer",
    "BearerTokenResponse",
    "CalendarMonthTTL",
    "TokenIssuer",
    "TokenRequest",
]
