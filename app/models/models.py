from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base_class import Base

if TYPE_CHECKING:
    from app.models.oauth_models import OAuthAccessToken
else:
    # Import at runtime for SQLAlchemy relationship resolution
    from app.models import oauth_models  # noqa: F401
    OAuthAccessToken = "OAuthAccessToken"


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class User(Base):
    """Local account a Google identity resolves to.

    Accounts are provisioned elsewhere; this service only looks them up.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    google_id: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    last_login: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    access_tokens: Mapped[list[OAuthAccessToken]] = relationship(
        "OAuthAccessToken",
        back_populates="user",
        foreign_keys="OAuthAccessToken.user_id",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, active={self.is_active})>"
