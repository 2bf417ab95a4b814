"""Grant exchanging a Google access token for this server's own tokens.

The client is resolved by id only: this grant never checks a client secret.
Mobile and browser apps holding a Google token are public clients, so the
Google token is the credential being verified, not the client.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import timedelta

from app.core.exceptions import (
    InvalidClientError,
    InvalidCredentialsError,
    InvalidRequestError,
    InvalidScopeError,
    UnauthorizedClientError,
)
from app.services.oauth.contracts import AuthServiceContract, ClientRepository, Emitter, ScopeRepository
from app.services.oauth.entities import ClientEntity, ScopeEntity, UserIdentity
from app.services.oauth.events import RequestEvent
from app.services.oauth.issuer import CalendarMonthTTL, TokenIssuer
from app.services.oauth.request import TokenRequest
from app.services.oauth.response import BearerTokenResponse

logger = logging.getLogger(__name__)

GRANT_IDENTIFIER = "google_access_token"
LOGIN_CHANNEL = "api"
SCOPE_DELIMITER = " "


class LookupStatus(str, enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class UserLookup:
    status: LookupStatus
    user: UserIdentity | None = None


class GoogleAccessTokenGrant:
    """Handles ``grant_type=google_access_token`` token requests."""

    def __init__(
        self,
        auth_service: AuthServiceContract,
        client_repository: ClientRepository,
        scope_repository: ScopeRepository,
        token_issuer: TokenIssuer,
        emitter: Emitter,
    ):
        self.auth_service = auth_service
        self.clients = client_repository
        self.scopes = scope_repository
        self.issuer = token_issuer
        self.emitter = emitter
        self._refresh_token_ttl = CalendarMonthTTL(months=1)

    @property
    def identifier(self) -> str:
        return GRANT_IDENTIFIER

    @property
    def refresh_token_ttl(self) -> CalendarMonthTTL:
        return self._refresh_token_ttl

    async def respond_to_access_token_request(
        self,
        request: TokenRequest,
        response: BearerTokenResponse,
        access_token_ttl: timedelta,
    ) -> BearerTokenResponse:
        # Validate request
        client = self.validate_client(request)
        scopes = self.validate_scopes(request.get_parameter("scope"))
        user = await self.validate_user(request)

        # Finalize the requested scopes
        scopes = self.scopes.finalize_scopes(scopes, self.identifier, client, user.identifier)

        # Issue and persist tokens
        access_token = self.issuer.issue_access_token(access_token_ttl, client, user.identifier, scopes)
        refresh_token = self.issuer.issue_refresh_token(access_token, self._refresh_token_ttl)

        response.set_access_token(access_token)
        response.set_refresh_token(refresh_token)

        try:
            self.auth_service.fire_login_event(LOGIN_CHANNEL, user)
        except Exception:  # noqa: BLE001
            logger.exception("Login event failed for user_id=%s", user.identifier)

        return response

    def validate_client(self, request: TokenRequest) -> ClientEntity:
        basic_auth_user, _ = request.get_basic_auth_credentials()

        client_id = request.get_parameter("client_id", basic_auth_user)
        if client_id is None:
            raise InvalidRequestError("client_id")

        # Get client without validating secret
        client = self.clients.get_client_entity(client_id)
        if client is None:
            self.emitter.emit(RequestEvent(RequestEvent.CLIENT_AUTHENTICATION_FAILED, request))
            raise InvalidClientError(used_basic_auth=basic_auth_user is not None)

        # A client registered with an explicit grant list may only use those
        if client.grant_types is not None and self.identifier not in client.grant_types:
            self.emitter.emit(RequestEvent(RequestEvent.CLIENT_AUTHENTICATION_FAILED, request))
            raise UnauthorizedClientError(self.identifier)

        return client

    def validate_scopes(self, scope_param: str | None) -> list[ScopeEntity]:
        validated: list[ScopeEntity] = []
        for name in (scope_param or "").split(SCOPE_DELIMITER):
            if not name:
                continue
            scope = self.scopes.get_scope_entity_by_identifier(name)
            if scope is None or not scope.allows_grant(self.identifier):
                raise InvalidScopeError(name)
            validated.append(scope)
        return validated

    async def validate_user(self, request: TokenRequest) -> UserIdentity:
        google_token = request.get_parameter("token")
        if google_token is None:
            raise InvalidRequestError("token")

        lookup = await self.lookup_user(google_token)
        if lookup.status is LookupStatus.FOUND and lookup.user is not None:
            return lookup.user

        self.emitter.emit(RequestEvent(RequestEvent.USER_AUTHENTICATION_FAILED, request))
        if lookup.status is LookupStatus.FAILED:
            raise InvalidRequestError("token")
        raise InvalidCredentialsError()

    async def lookup_user(self, google_token: str) -> UserLookup:
        """Ask the identity bridge for the user; failures become an outcome, not an exception."""
        try:
            user = await self.auth_service.get_google_user_by_access_token(google_token)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Google token lookup failed: %s", type(exc).__name__)
            return UserLookup(LookupStatus.FAILED)
        if user is None:
            return UserLookup(LookupStatus.NOT_FOUND)
        return UserLookup(LookupStatus.FOUND, user)
