"""Tests for persisted token records and acting-user stamping."""
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.orm.exc import StaleDataError

from app.core.config import settings
from app.core.exceptions import TokenRecordConflictError, TokenRecordNotFoundError, UserNotFoundError
from app.db.session import SessionLocal
from app.models.oauth_models import OAuthAccessToken
from app.repositories import RefreshTokenRepository, TokenRepository
from app.services.oauth import AccessTokenEntity, ClientEntity, RefreshTokenEntity, ScopeEntity
from app.services.oauth.contracts import UniqueTokenIdentifierError

CLIENT = ClientEntity(identifier="mobile-app", name="Mobile App")


def _access_token(identifier: str, user_id: int) -> AccessTokenEntity:
    return AccessTokenEntity(
        identifier=identifier,
        client=CLIENT,
        user_identifier=user_id,
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        scopes=[ScopeEntity("profile")],
    )


@pytest.fixture
def issued(db_session, oauth_client, make_user):
    """An access token issued to one user, plus a second user to act as."""
    owner = make_user("owner@example.com")
    actor = make_user("actor@example.com")
    TokenRepository(db_session).persist_new_access_token(_access_token("a" * 80, owner.id))
    db_session.commit()
    return owner, actor


def test_persist_new_access_token(db_session, issued):
    owner, _ = issued
    record = TokenRepository(db_session).find("a" * 80)

    assert record.user_id == owner.id
    assert record.client_id == "mobile-app"
    assert record.scopes == ["profile"]
    assert record.acting_user_id is None
    assert record.revoked is False
    assert record.is_expired is False


def test_duplicate_access_token_identifier_rejected(db_session, issued):
    owner, _ = issued
    with pytest.raises(UniqueTokenIdentifierError):
        TokenRepository(db_session).persist_new_access_token(_access_token("a" * 80, owner.id))


def test_stamp_acting_user_is_visible_to_later_reads(db_session, issued):
    _, actor = issued

    TokenRepository(db_session).stamp_acting_user("a" * 80, actor.id)

    fresh = SessionLocal()
    try:
        record = fresh.get(OAuthAccessToken, "a" * 80)
        assert record.acting_user_id == actor.id
        assert record.version_id == 2
    finally:
        fresh.close()


def test_stamp_acting_user_writes_audit_line(db_session, issued):
    owner, actor = issued

    TokenRepository(db_session).stamp_acting_user("a" * 80, actor.id)

    with open(settings.AUDIT_LOG_FILE, encoding="utf-8") as f:
        events = [json.loads(line) for line in f]
    assert events[-1]["action"] == "token.acting_user.stamped"
    assert events[-1]["user_id"] == owner.id
    assert events[-1]["acting_user_id"] == actor.id


def test_stamp_unknown_token_changes_nothing(db_session, issued):
    _, actor = issued
    repo = TokenRepository(db_session)

    with pytest.raises(TokenRecordNotFoundError) as exc_info:
        repo.stamp_acting_user("b" * 80, actor.id)

    assert exc_info.value.status_code == 404
    assert db_session.query(OAuthAccessToken).count() == 1
    assert repo.find("a" * 80).acting_user_id is None


def test_stamp_unknown_user_changes_nothing(db_session, issued):
    repo = TokenRepository(db_session)

    with pytest.raises(UserNotFoundError):
        repo.stamp_acting_user("a" * 80, 9999)

    assert repo.find("a" * 80).acting_user_id is None


def test_stamp_conflict_rolls_back():
    session = MagicMock()
    session.get.return_value = MagicMock(spec=OAuthAccessToken)
    session.commit.side_effect = StaleDataError("row version changed")

    with pytest.raises(TokenRecordConflictError) as exc_info:
        TokenRepository(session).stamp_acting_user("c" * 80, 5)

    assert exc_info.value.status_code == 409
    session.rollback.assert_called_once()


def test_concurrent_stamp_detected(db_session, issued):
    """A write based on a stale version is rejected."""
    _, actor = issued
    stale = SessionLocal()
    try:
        stale_record = stale.get(OAuthAccessToken, "a" * 80)
        TokenRepository(db_session).stamp_acting_user("a" * 80, actor.id)

        stale_record.revoked = True
        with pytest.raises(StaleDataError):
            stale.commit()
    finally:
        stale.rollback()
        stale.close()


def test_revoke_access_token(db_session, issued):
    repo = TokenRepository(db_session)

    assert repo.is_access_token_revoked("a" * 80) is False
    repo.revoke_access_token("a" * 80)
    assert repo.is_access_token_revoked("a" * 80) is True
    assert repo.is_access_token_revoked("missing") is True

    with pytest.raises(TokenRecordNotFoundError):
        repo.revoke_access_token("missing")


def test_refresh_token_lifecycle(db_session, issued):
    owner, _ = issued
    repo = RefreshTokenRepository(db_session)
    refresh = RefreshTokenEntity(
        identifier="r" * 80,
        access_token=_access_token("a" * 80, owner.id),
        expires_at=datetime.now(timezone.utc) + timedelta(days=30),
    )

    repo.persist_new_refresh_token(refresh)
    with pytest.raises(UniqueTokenIdentifierError):
        repo.persist_new_refresh_token(refresh)

    assert repo.is_refresh_token_revoked("r" * 80) is False
    repo.revoke_refresh_token("r" * 80)
    assert repo.is_refresh_token_revoked("r" * 80) is True
