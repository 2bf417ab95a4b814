from __future__ import annotations

import os

os.environ.setdefault("ENV", "test")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.db import session as session_module  # noqa: E402
from app.db.base_class import Base  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.models.models import User  # noqa: E402
from app.models.oauth_models import OAuthClient, OAuthScope  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
settings.DATABASE_URL = TEST_DATABASE_URL  # type: ignore[attr-defined]
settings.ENV = "test"  # type: ignore[attr-defined]
session_module.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Ensure each test sees a fresh database schema."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture(autouse=True)
def _isolate_audit_log(tmp_path, monkeypatch):
    """Keep audit lines out of the working tree."""
    monkeypatch.setattr(settings, "AUDIT_LOG_FILE", str(tmp_path / "audit.log"))


@pytest.fixture
def db_session():
    """Provide a database session for tests."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture
def make_user(db_session):
    def _make_user(email: str = "ada@example.com", google_id: str | None = None, is_active: bool = True) -> User:
        user = User(email=email, name=email.split("@")[0], google_id=google_id, is_active=is_active)
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def oauth_client(db_session) -> OAuthClient:
    client = OAuthClient(id="mobile-app", name="Mobile App", redirect_uris=[])
    db_session.add(client)
    db_session.add_all([
        OAuthScope(id="profile", description="Read profile"),
        OAuthScope(id="orders", description="Manage orders"),
        OAuthScope(id="admin", description="Password grant only", grant_types=["password"]),
    ])
    db_session.commit()
    return client
