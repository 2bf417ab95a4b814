"""Lookup-only access to local users, including Google token resolution."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.models import User
from app.services.identity import GoogleIdentityBridge, GoogleProfile
from app.services.oauth.entities import UserIdentity

logger = logging.getLogger(__name__)


def to_identity(user: User) -> UserIdentity:
    return UserIdentity(identifier=user.id, email=user.email, name=user.name)


class UserRepository:
    def __init__(self, db: Session, google: GoogleIdentityBridge | None = None):
        self.db = db
        self.google = google or GoogleIdentityBridge()

    def find_one_for_auth(self, user_id: int) -> UserIdentity | None:
        user = self.db.get(User, user_id)
        if user is None or not user.is_active:
            return None
        return to_identity(user)

    async def get_google_user_by_access_token(self, google_token: str) -> UserIdentity | None:
        """Resolve a Google access token; bridge errors propagate to the caller."""
        profile = await self.google.fetch_profile_by_access_token(google_token)
        return self._match_profile(profile)

    async def get_google_user_by_id_token(self, google_token: str) -> UserIdentity | None:
        profile = await self.google.fetch_profile_by_id_token(google_token)
        return self._match_profile(profile)

    def _match_profile(self, profile: GoogleProfile) -> UserIdentity | None:
        user = self.db.scalar(select(User).where(User.google_id == profile.subject))
        if user is None:
            if not profile.email or not profile.email_verified:
                logger.info("Google profile has no verified email | sub=%s", profile.subject)
                return None
            user = self.db.scalar(select(User).where(User.email == profile.email.lower()))
        if user is None or not user.is_active:
            logger.info("No active local user for Google profile | sub=%s", profile.subject)
            return None
        return to_identity(user)
