"""Access/refresh token minting with identifier-collision retries."""
from __future__ import annotations

import calendar
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from app.core.exceptions import UniqueTokenIdentifierExhaustedError
from app.services.oauth.contracts import (
    AccessTokenRepository,
    RefreshTokenRepository,
    UniqueTokenIdentifierError,
)
from app.services.oauth.entities import (
    AccessTokenEntity,
    ClientEntity,
    RefreshTokenEntity,
    ScopeEntity,
)

logger = logging.getLogger(__name__)

MAX_RANDOM_TOKEN_GENERATION_ATTEMPTS = 10


def generate_unique_identifier(length: int = 40) -> str:
    """Random hex identifier, ``2 * length`` characters long."""
    return secrets.token_hex(length)


@dataclass(frozen=True)
class CalendarMonthTTL:
    """Lifetime measured in calendar months (Jan 31 + 1 month = Feb 28/29)."""

    months: int = 1

    def expires_from(self, start: datetime) -> datetime:
        month_index = start.month - 1 + self.months
        year = start.year + month_index // 12
        month = month_index % 12 + 1
        day = min(start.day, calendar.monthrange(year, month)[1])
        return start.replace(year=year, month=month, day=day)


class TokenIssuer:
    def __init__(
        self,
        access_token_repository: AccessTokenRepository,
        refresh_token_repository: RefreshTokenRepository,
    ):
        self.access_tokens = access_token_repository
        self.refresh_tokens = refresh_token_repository

    def issue_access_token(
        self,
        ttl: timedelta,
        client: ClientEntity,
        user_identifier: int | None,
        scopes: list[ScopeEntity],
    ) -> AccessTokenEntity:
        token = AccessTokenEntity(
            identifier="",
            client=client,
            user_identifier=user_identifier,
            expires_at=datetime.now(timezone.utc) + ttl,
            scopes=list(scopes),
        )
        for _ in range(MAX_RANDOM_TOKEN_GENERATION_ATTEMPTS):
            token.identifier = generate_unique_identifier()
            try:
                self.access_tokens.persist_new_access_token(token)
            except UniqueTokenIdentifierError:
                logger.warning("Access token identifier collision, regenerating")
                continue
            return token
        raise UniqueTokenIdentifierExhaustedError()

    def issue_refresh_token(self, access_token: AccessTokenEntity, ttl: CalendarMonthTTL) -> RefreshTokenEntity:
        token = RefreshTokenEntity(
            identifier="",
            access_token=access_token,
            expires_at=ttl.expires_from(datetime.now(timezone.utc)),
        )
        for _ in range(MAX_RANDOM_TOKEN_GENERATION_ATTEMPTS):
            token.identifier = generate_unique_identifier()
            try:
                self.refresh_tokens.persist_new_refresh_token(token)
            except UniqueTokenIdentifierError:
                logger.warning("Refresh token identifier collision, regenerating")
                continue
            return token
        raise UniqueTokenIdentifierExhaustedError()
