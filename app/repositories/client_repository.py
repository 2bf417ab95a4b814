"""OAuth client lookup and registration."""
from __future__ import annotations

import logging
import secrets

from sqlalchemy.orm import Session

from app.core.security import hash_client_secret, verify_client_secret
from app.models.oauth_models import OAuthClient
from app.services.oauth.entities import ClientEntity

logger = logging.getLogger(__name__)


def to_entity(client: OAuthClient) -> ClientEntity:
    return ClientEntity(
        identifier=client.id,
        name=client.name,
        redirect_uris=tuple(client.redirect_uris or ()),
        grant_types=frozenset(client.grant_types) if client.grant_types is not None else None,
        scopes=frozenset(client.scopes) if client.scopes is not None else None,
        is_confidential=client.secret_hash is not None,
    )


class ClientRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_client_entity(self, client_id: str) -> ClientEntity | None:
        client = self.db.get(OAuthClient, client_id)
        if client is None or client.revoked:
            return None
        return to_entity(client)

    def validate_client_secret(self, client_id: str, secret: str) -> bool:
        """Secret check for grants that require confidential clients."""
        client = self.db.get(OAuthClient, client_id)
        if client is None or client.revoked or client.secret_hash is None:
            return False
        return verify_client_secret(secret, client.secret_hash)

    def register_client(
        self,
        name: str,
        *,
        client_id: str | None = None,
        confidential: bool = False,
        redirect_uris: list[str] | None = None,
        grant_types: list[str] | None = None,
        scopes: list[str] | None = None,
    ) -> tuple[ClientEntity, str | None]:
        """
        Register a client.

        Returns:
            The client entity and the plain secret (only for confidential
            clients; it is not recoverable later).
        """
        plain_secret = secrets.token_urlsafe(32) if confidential else None
        client = OAuthClient(
            id=client_id or secrets.token_hex(16),
            name=name,
            secret_hash=hash_client_secret(plain_secret) if plain_secret else None,
            redirect_uris=redirect_uris or [],
            grant_types=grant_types,
            scopes=scopes,
        )
        self.db.add(client)
        self.db.commit()
        logger.info("Registered OAuth client: %s", client.id)
        return to_entity(client), plain_secret
