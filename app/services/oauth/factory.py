"""Factory function for creating a configured authorization server."""
from datetime import timedelta

from sqlalchemy.orm import Session

from app.core.config import settings
from app.repositories import (
    ClientRepository,
    RefreshTokenRepository,
    ScopeRepository,
    TokenRepository,
    UserRepository,
)
from app.services.auth_service import AuthService
from app.services.identity import GoogleIdentityBridge

from .events import EventEmitter, create_event_emitter
from .grants import GoogleAccessTokenGrant
from .issuer import TokenIssuer
from .server import AuthorizationServer


def create_authorization_server(
    db: Session,
    google: GoogleIdentityBridge | None = None,
    emitter: EventEmitter | None = None,
) -> AuthorizationServer:
    """
    Build an authorization server bound to one request's database session.

    Args:
        db: Database session
        google: Identity bridge (defaults to one configured from settings)
        emitter: Event emitter (defaults to one with audit listeners)

    Returns:
        AuthorizationServer with every supported grant enabled
    """
    emitter = emitter or create_event_emitter()
    access_ttl = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    server = AuthorizationServer(default_access_token_ttl=access_ttl, unit_of_work=db)

    auth_service = AuthService(db, UserRepository(db, google), emitter)
    issuer = TokenIssuer(TokenRepository(db), RefreshTokenRepository(db))
    server.enable_grant_type(
        GoogleAccessTokenGrant(
            auth_service=auth_service,
            client_repository=ClientRepository(db),
            scope_repository=ScopeRepository(db),
            token_issuer=issuer,
            emitter=emitter,
        ),
        access_ttl,
    )
    return server
