"""Persistence for issued access and refresh tokens.

``TokenRepository.stamp_acting_user`` records which user an already-issued
access token acts on behalf of. The write is guarded by the record's
``version_id``: a concurrent update between read and commit raises
``TokenRecordConflictError`` instead of silently overwriting.
"""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.audit import log_audit_event
from app.core.exceptions import TokenRecordConflictError, TokenRecordNotFoundError, UserNotFoundError
from app.models.models import User
from app.models.oauth_models import OAuthAccessToken, OAuthRefreshToken
from app.services.oauth.contracts import UniqueTokenIdentifierError
from app.services.oauth.entities import AccessTokenEntity, RefreshTokenEntity

logger = logging.getLogger(__name__)


class TokenRepository:
    """Access-token records."""

    def __init__(self, db: Session):
        self.db = db

    def find(self, token_identifier: str) -> OAuthAccessToken | None:
        return self.db.get(OAuthAccessToken, token_identifier)

    def persist_new_access_token(self, token: AccessTokenEntity) -> None:
        if self.find(token.identifier) is not None:
            raise UniqueTokenIdentifierError(token.identifier)
        record = OAuthAccessToken(
            id=token.identifier,
            user_id=token.user_identifier,
            client_id=token.client.identifier,
            scopes=token.scope_names,
            expires_at=token.expires_at,
        )
        self.db.add(record)
        # Flush only; the token endpoint commits access and refresh rows together
        self.db.flush()
        logger.info("Issued access token for client=%s user_id=%s", token.client.identifier, token.user_identifier)

    def revoke_access_token(self, token_identifier: str) -> None:
        record = self.find(token_identifier)
        if record is None:
            raise TokenRecordNotFoundError(token_identifier)
        record.revoked = True
        self.db.commit()

    def is_access_token_revoked(self, token_identifier: str) -> bool:
        record = self.find(token_identifier)
        return record is None or record.revoked

    def stamp_acting_user(self, token_identifier: str, user_id: int) -> None:
        """
        Stamp the acting-user id onto an issued access token.

        Raises:
            TokenRecordNotFoundError: no record for ``token_identifier``
            UserNotFoundError: ``user_id`` does not exist
            TokenRecordConflictError: the record changed concurrently
        """
        record = self.find(token_identifier)
        if record is None:
            raise TokenRecordNotFoundError(token_identifier)
        if self.db.get(User, user_id) is None:
            raise UserNotFoundError(user_id)

        record.acting_user_id = user_id
        try:
            self.db.commit()
        except StaleDataError as exc:
            self.db.rollback()
            logger.warning("Concurrent update on access token %s...", token_identifier[:8])
            raise TokenRecordConflictError(token_identifier) from exc

        log_audit_event(
            "token.acting_user.stamped",
            user_id=record.user_id,
            acting_user_id=user_id,
            client_id=record.client_id,
        )


class RefreshTokenRepository:
    """Refresh-token records."""

    def __init__(self, db: Session):
        self.db = db

    def persist_new_refresh_token(self, token: RefreshTokenEntity) -> None:
        if self.db.get(OAuthRefreshToken, token.identifier) is not None:
            raise UniqueTokenIdentifierError(token.identifier)
        self.db.add(
            OAuthRefreshToken(
                id=token.identifier,
                access_token_id=token.access_token.identifier,
                expires_at=token.expires_at,
            )
        )
        self.db.flush()

    def revoke_refresh_token(self, token_identifier: str) -> None:
        record = self.db.get(OAuthRefreshToken, token_identifier)
        if record is None:
            raise TokenRecordNotFoundError(token_identifier)
        record.revoked = True
        self.db.commit()

    def is_refresh_token_revoked(self, token_identifier: str) -> bool:
        record = self.db.get(OAuthRefreshToken, token_identifier)
        return record is None or record.revoked
