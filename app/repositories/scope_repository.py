"""Scope lookup and the server-side scope finalization policy."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.models.oauth_models import OAuthScope
from app.services.oauth.entities import ClientEntity, ScopeEntity

logger = logging.getLogger(__name__)


class ScopeRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_scope_entity_by_identifier(self, identifier: str) -> ScopeEntity | None:
        scope = self.db.get(OAuthScope, identifier)
        if scope is None:
            return None
        return ScopeEntity(
            identifier=scope.id,
            grant_types=frozenset(scope.grant_types) if scope.grant_types is not None else None,
        )

    def finalize_scopes(
        self,
        scopes: list[ScopeEntity],
        grant_type: str,
        client: ClientEntity,
        user_identifier: int | None = None,
    ) -> list[ScopeEntity]:
        """Narrow the requested scopes to what the client may hold; drop duplicates."""
        finalized: list[ScopeEntity] = []
        seen: set[str] = set()
        for scope in scopes:
            if scope.identifier in seen:
                continue
            if client.scopes is not None and scope.identifier not in client.scopes:
                logger.info(
                    "Dropping scope %s not allowed for client %s (grant=%s user_id=%s)",
                    scope.identifier, client.identifier, grant_type, user_identifier,
                )
                continue
            seen.add(scope.identifier)
            finalized.append(scope)
        return finalized
