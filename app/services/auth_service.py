from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.models.models import User
from app.repositories.user_repository import UserRepository
from app.services.oauth.contracts import Emitter
from app.services.oauth.entities import UserIdentity
from app.services.oauth.events import LoginEvent

logger = logging.getLogger(__name__)


class AuthService:
    """Google user resolution and login signalling used by token grants."""

    def __init__(self, db: Session, users: UserRepository, emitter: Emitter):
        self.db = db
        self.users = users
        self.emitter = emitter

    async def get_google_user_by_access_token(self, google_token: str) -> UserIdentity | None:
        return await self.users.get_google_user_by_access_token(google_token)

    async def get_google_user_by_id_token(self, google_token: str) -> UserIdentity | None:
        return await self.users.get_google_user_by_id_token(google_token)

    def fire_login_event(self, channel: str, user: UserIdentity) -> None:
        record = self.db.get(User, user.identifier)
        if record is not None:
            # Committed with the issued tokens by the caller's unit of work
            record.last_login = datetime.now(timezone.utc)
        self.emitter.emit(LoginEvent.for_user(channel, user))
        logger.info("User logged in via %s: user_id=%s", channel, user.identifier)
