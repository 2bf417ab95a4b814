"""
OAuth2 server storage models.

Registered clients, scopes, and the access/refresh token records issued by
the token endpoint.

- Token records are keyed by their public identifier (the JWT ``jti``).
- Access tokens carry an auxiliary ``acting_user_id`` stamped after issuance
  when a token acts on behalf of another user.
- ``version_id`` enables optimistic concurrency on access-token updates.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base_class import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.models import User


class OAuthClient(TimestampMixin, Base):
    """
    Registered OAuth2 application.

    Attributes:
        id: Public client identifier
        name: Display name
        secret_hash: bcrypt hash of the client secret (NULL for public clients)
        redirect_uris: JSON array of allowed redirect URIs
        grant_types: JSON array of allowed grant types (NULL = any)
        scopes: JSON array of allowed scopes (NULL = any)
        revoked: Revoked clients never resolve
    """

    __tablename__ = "oauth_clients"

    id = Column(String(100), primary_key=True)
    name = Column(String(255), nullable=False)
    secret_hash = Column(String(255), nullable=True)
    redirect_uris = Column(JSON, nullable=True)
    grant_types = Column(JSON, nullable=True)
    scopes = Column(JSON, nullable=True)
    revoked = Column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        """String representation (no secret)."""
        return f"<OAuthClient(id={self.id}, revoked={self.revoked})>"


class OAuthScope(Base):
    """Named permission unit. ``grant_types`` NULL means usable by every grant."""

    __tablename__ = "oauth_scopes"

    id = Column(String(100), primary_key=True)
    description = Column(String(255), nullable=True)
    grant_types = Column(JSON, nullable=True)


class OAuthAccessToken(TimestampMixin, Base):
    """
    Persisted access token record.

    Attributes:
        id: Public token identifier (80 hex chars)
        user_id: Token subject
        client_id: Issuing client
        scopes: JSON array of finalized scope identifiers
        revoked: Whether the token was revoked
        expires_at: Access token expiry
        acting_user_id: User the token acts on behalf of (NULL if none)
        version_id: Row version for optimistic concurrency
    """

    __tablename__ = "oauth_access_tokens"

    id = Column(String(100), primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    client_id = Column(
        String(100),
        ForeignKey("oauth_clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    scopes = Column(JSON, nullable=True)
    revoked = Column(Boolean, default=False, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    acting_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    version_id = Column(Integer, nullable=False, default=1)

    user = relationship("User", back_populates="access_tokens", foreign_keys=[user_id])
    refresh_tokens = relationship("OAuthRefreshToken", back_populates="access_token")

    __mapper_args__ = {"version_id_col": version_id}

    __table_args__ = (
        Index("ix_oauth_access_tokens_expires", "expires_at"),
    )

    def __repr__(self) -> str:
        """String representation (identifier prefix only)."""
        revoked = " (REVOKED)" if self.revoked else ""
        return (
            f"<OAuthAccessToken(id={self.id[:8]}..., "
            f"user_id={self.user_id}, "
            f"client_id={self.client_id}{revoked})>"
        )

    @property
    def is_expired(self) -> bool:
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            # SQLite drops tzinfo; values are written in UTC
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) >= expires_at


class OAuthRefreshToken(Base):
    """Refresh token bound to exactly one access token."""

    __tablename__ = "oauth_refresh_tokens"

    id = Column(String(100), primary_key=True)
    access_token_id = Column(
        String(100),
        ForeignKey("oauth_access_tokens.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    revoked = Column(Boolean, default=False, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    access_token = relationship("OAuthAccessToken", back_populates="refresh_tokens")
