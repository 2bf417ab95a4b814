"""SQLAlchemy-backed implementations of the grant engine contracts."""
from .client_repository import ClientRepository
from .scope_repository import ScopeRepository
from .token_repository import RefreshTokenRepository, TokenRepository
from .user_repository import UserRepository

__all__ = [
    "ClientRepository",
    "RefreshTokenRepository",
    "ScopeRepository",
    "TokenRepository",
    "UserRepository",
]
