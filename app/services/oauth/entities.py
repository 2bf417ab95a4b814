"""Value objects passed between the grant engine and its repositories."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ClientEntity:
    """A registered OAuth2 application. Looked up, never mutated, by grants."""

    identifier: str
    name: str
    redirect_uris: tuple[str, ...] = ()
    grant_types: frozenset[str] | None = None  # None = any grant
    scopes: frozenset[str] | None = None  # None = any scope
    is_confidential: bool = False


@dataclass(frozen=True)
class ScopeEntity:
    identifier: str
    grant_types: frozenset[str] | None = None  # None = usable by every grant

    def allows_grant(self, grant_type: str) -> bool:
        return self.grant_types is None or grant_type in self.grant_types


@dataclass(frozen=True)
class UserIdentity:
    """A resolved user, produced per request and referenced only by identifier."""

    identifier: int
    email: str | None = None
    name: str | None = None


@dataclass
class AccessTokenEntity:
    identifier: str
    client: ClientEntity
    user_identifier: int | None
    expires_at: datetime
    scopes: list[ScopeEntity] = field(default_factory=list)

    @property
    def scope_names(self) -> list[str]:
        return [scope.identifier for scope in self.scopes]


@dataclass
class RefreshTokenEntity:
    identifier: str
    access_token: AccessTokenEntity
    expires_at: datetime
