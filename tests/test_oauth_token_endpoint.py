"""End-to-end tests for POST /oauth/token with the Google bridge mocked."""
import base64
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from app.api.main import app
from app.api.routes_oauth import get_identity_bridge
from app.core.security import TokenType, decode_token
from app.models.models import User
from app.models.oauth_models import OAuthAccessToken, OAuthClient, OAuthRefreshToken
from app.repositories import TokenRepository
from app.services.identity import GoogleProfile, IdentityResponseError, IdentityTransportError

PROFILE = GoogleProfile(subject="g-123", email="ada@example.com", email_verified=True)


@pytest.fixture
def google():
    bridge = Mock()
    bridge.fetch_profile_by_access_token = AsyncMock(return_value=PROFILE)
    app.dependency_overrides[get_identity_bridge] = lambda: bridge
    yield bridge
    app.dependency_overrides.pop(get_identity_bridge, None)


@pytest.fixture
def client(google):
    return TestClient(app)


def _exchange(client: TestClient, headers: dict | None = None, **form):
    form.setdefault("grant_type", "google_access_token")
    return client.post("/oauth/token", data=form, headers=headers or {})


def test_exchange_google_token(client, google, db_session, oauth_client, make_user):
    user = make_user("ada@example.com", google_id="g-123")

    resp = _exchange(client, client_id="mobile-app", scope="profile orders", token="ya29.token")

    assert resp.status_code == 200, resp.text
    assert resp.headers["cache-control"] == "no-store"
    body = resp.json()
    assert body["token_type"] == "Bearer"
    assert 0 < body["expires_in"] <= 3600

    access = decode_token(body["access_token"], TokenType.ACCESS, audience="mobile-app")
    refresh = decode_token(body["refresh_token"], TokenType.REFRESH)
    assert access["sub"] == str(user.id)
    assert access["scopes"] == ["profile", "orders"]
    assert refresh["access_token_id"] == access["jti"]
    google.fetch_profile_by_access_token.assert_awaited_once_with("ya29.token")

    record = db_session.get(OAuthAccessToken, access["jti"])
    assert record.user_id == user.id
    assert db_session.get(OAuthRefreshToken, refresh["jti"]).access_token_id == access["jti"]


def test_exchange_records_last_login(client, db_session, oauth_client, make_user):
    user = make_user("ada@example.com", google_id="g-123")

    assert _exchange(client, client_id="mobile-app", token="ya29.token").status_code == 200

    db_session.expire_all()
    assert db_session.get(User, user.id).last_login is not None


def test_issued_token_can_be_stamped(client, db_session, oauth_client, make_user):
    make_user("ada@example.com", google_id="g-123")
    actor = make_user("support@example.com")

    body = _exchange(client, client_id="mobile-app", token="ya29.token").json()
    jti = decode_token(body["access_token"])["jti"]
    TokenRepository(db_session).stamp_acting_user(jti, actor.id)

    db_session.expire_all()
    assert db_session.get(OAuthAccessToken, jti).acting_user_id == actor.id


def test_basic_auth_client(client, oauth_client, make_user):
    make_user("ada@example.com", google_id="g-123")
    basic = base64.b64encode(b"mobile-app:").decode()

    resp = _exchange(client, headers={"Authorization": f"Basic {basic}"}, token="ya29.token")

    assert resp.status_code == 200, resp.text


def test_missing_client_id(client, google, oauth_client):
    resp = _exchange(client, token="ya29.token")

    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_request"
    assert "client_id" in resp.json()["hint"]
    google.fetch_profile_by_access_token.assert_not_awaited()


def test_unknown_client(client, oauth_client):
    resp = _exchange(client, client_id="nope", token="ya29.token")

    assert resp.status_code == 401
    assert resp.json()["error"] == "invalid_client"
    assert "www-authenticate" not in resp.headers


def test_client_restricted_to_other_grants(client, google, db_session, oauth_client, make_user):
    make_user("ada@example.com", google_id="g-123")
    db_session.add(OAuthClient(id="pw-only", name="Password App", redirect_uris=[], grant_types=["password"]))
    db_session.commit()

    resp = _exchange(client, client_id="pw-only", token="ya29.token")

    assert resp.status_code == 400
    assert resp.json()["error"] == "unauthorized_client"
    google.fetch_profile_by_access_token.assert_not_awaited()
    assert db_session.query(OAuthAccessToken).count() == 0


def test_unknown_basic_auth_client_challenges(client, oauth_client):
    basic = base64.b64encode(b"nope:").decode()

    resp = _exchange(client, headers={"Authorization": f"Basic {basic}"}, token="ya29.token")

    assert resp.status_code == 401
    assert resp.headers["www-authenticate"].startswith("Basic")


def test_invalid_scope(client, oauth_client):
    resp = _exchange(client, client_id="mobile-app", scope="admin", token="ya29.token")

    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_scope"


def test_missing_google_token(client, oauth_client):
    resp = _exchange(client, client_id="mobile-app")

    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_request"
    assert "token" in resp.json()["hint"]


@pytest.mark.parametrize("error", [IdentityTransportError("down"), IdentityResponseError("rejected")])
def test_bridge_failure(client, google, oauth_client, error):
    google.fetch_profile_by_access_token.side_effect = error

    resp = _exchange(client, client_id="mobile-app", token="ya29.token")

    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_request"


def test_unknown_google_user(client, db_session, oauth_client):
    resp = _exchange(client, client_id="mobile-app", token="ya29.token")

    assert resp.status_code == 401
    assert resp.json()["error"] == "invalid_grant"
    assert db_session.query(OAuthAccessToken).count() == 0


def test_unsupported_grant_type(client):
    resp = _exchange(client, grant_type="password", username="ada", password="secret")

    assert resp.status_code == 400
    assert resp.json()["error"] == "unsupported_grant_type"


def test_grant_types_listed(client):
    resp = client.get("/oauth/grant-types")

    assert resp.status_code == 200
    assert resp.json() == {"grant_types": ["google_access_token"]}


def test_health_endpoints(client):
    assert client.get("/live").json() == {"status": "alive"}
    assert client.get("/health").json() == {"status": "ok"}
