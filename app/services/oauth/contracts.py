"""Capabilities a grant depends on.

Grants hold explicit references to these instead of inheriting helpers from
a common base, so each grant asks only for what it uses.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from app.services.oauth.entities import (
    AccessTokenEntity,
    ClientEntity,
    RefreshTokenEntity,
    ScopeEntity,
    UserIdentity,
)
from app.services.oauth.events import RequestEvent


class UniqueTokenIdentifierError(Exception):
    """Raised by a token repository when an identifier is already taken."""


@runtime_checkable
class ClientRepository(Protocol):
    def get_client_entity(self, client_id: str) -> ClientEntity | None:
        """Look a client up by id. Does not verify any secret."""
        ...


@runtime_checkable
class ScopeRepository(Protocol):
    def get_scope_entity_by_identifier(self, identifier: str) -> ScopeEntity | None:
        ...

    def finalize_scopes(
        self,
        scopes: list[ScopeEntity],
        grant_type: str,
        client: ClientEntity,
        user_identifier: int | None = None,
    ) -> list[ScopeEntity]:
        """Return the authoritative scope set; may add or remove scopes."""
        ...


@runtime_checkable
class AccessTokenRepository(Protocol):
    def persist_new_access_token(self, token: AccessTokenEntity) -> None:
        """Raise ``UniqueTokenIdentifierError`` if the identifier exists."""
        ...


@runtime_checkable
class RefreshTokenRepository(Protocol):
    def persist_new_refresh_token(self, token: RefreshTokenEntity) -> None:
        """Raise ``UniqueTokenIdentifierError`` if the identifier exists."""
        ...


@runtime_checkable
class Emitter(Protocol):
    def emit(self, event: RequestEvent) -> None:
        ...


@runtime_checkable
class AuthServiceContract(Protocol):
    async def get_google_user_by_access_token(self, google_token: str) -> UserIdentity | None:
        """Resolve a Google access token to a local user; raise on transport/parse errors."""
        ...

    async def get_google_user_by_id_token(self, google_token: str) -> UserIdentity | None:
        ...

    def fire_login_event(self, channel: str, user: UserIdentity) -> None:
        ...
