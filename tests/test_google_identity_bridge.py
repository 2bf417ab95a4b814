"""Tests for the Google identity bridge (HTTP mocked)."""
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from app.services.identity import (
    GoogleIdentityBridge,
    GoogleProfile,
    IdentityProviderError,
    IdentityResponseError,
    IdentityTransportError,
)

USERINFO = {
    "sub": "1098765",
    "email": "ada@example.com",
    "email_verified": True,
    "name": "Ada Lovelace",
    "picture": "https://example.com/ada.png",
}


@pytest.fixture
def bridge():
    return GoogleIdentityBridge(
        userinfo_url="https://google.test/userinfo",
        tokeninfo_url="https://google.test/tokeninfo",
        client_id="web-client.apps.googleusercontent.com",
        timeout=3.0,
    )


def _response(payload) -> Mock:
    mock_response = Mock()
    mock_response.json.return_value = payload
    mock_response.raise_for_status = Mock()
    return mock_response


@pytest.mark.asyncio
async def test_access_token_profile(bridge):
    """Access token is sent as a bearer header to userinfo."""
    with patch('httpx.AsyncClient') as mock_client:
        mock_get = AsyncMock(return_value=_response(USERINFO))
        mock_client.return_value.__aenter__.return_value.get = mock_get

        profile = await bridge.fetch_profile_by_access_token("ya29.token")

    assert profile == GoogleProfile(
        subject="1098765",
        email="ada@example.com",
        email_verified=True,
        name="Ada Lovelace",
        picture="https://example.com/ada.png",
    )
    args, kwargs = mock_get.call_args
    assert args[0] == "https://google.test/userinfo"
    assert kwargs["headers"] == {"Authorization": "Bearer ya29.token"}
    assert kwargs["timeout"] == 3.0


@pytest.mark.asyncio
async def test_legacy_userinfo_fields(bridge):
    """v2 userinfo uses ``id`` and ``verified_email``."""
    payload = {"id": "42", "email": "ada@example.com", "verified_email": True}
    with patch('httpx.AsyncClient') as mock_client:
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(return_value=_response(payload))

        profile = await bridge.fetch_profile_by_access_token("ya29.token")

    assert profile.subject == "42"
    assert profile.email_verified is True


@pytest.mark.asyncio
async def test_rejected_token_raises_response_error(bridge):
    mock_response = Mock(status_code=401)
    mock_response.raise_for_status = Mock(
        side_effect=httpx.HTTPStatusError("Unauthorized", request=Mock(), response=mock_response)
    )
    with patch('httpx.AsyncClient') as mock_client:
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(return_value=mock_response)

        with pytest.raises(IdentityResponseError, match="401"):
            await bridge.fetch_profile_by_access_token("expired")


@pytest.mark.asyncio
async def test_network_failure_raises_transport_error(bridge):
    with patch('httpx.AsyncClient') as mock_client:
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(
            side_effect=httpx.ConnectError("connection refused")
        )

        with pytest.raises(IdentityTransportError) as exc_info:
            await bridge.fetch_profile_by_access_token("ya29.token")

    assert isinstance(exc_info.value, IdentityProviderError)


@pytest.mark.asyncio
async def test_non_json_body_raises_response_error(bridge):
    mock_response = _response(None)
    mock_response.json.side_effect = ValueError("not json")
    with patch('httpx.AsyncClient') as mock_client:
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(return_value=mock_response)

        with pytest.raises(IdentityResponseError):
            await bridge.fetch_profile_by_access_token("ya29.token")


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [["not", "a", "dict"], {"email": "ada@example.com"}])
async def test_unusable_payload_raises_response_error(bridge, payload):
    with patch('httpx.AsyncClient') as mock_client:
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(return_value=_response(payload))

        with pytest.raises(IdentityResponseError):
            await bridge.fetch_profile_by_access_token("ya29.token")


@pytest.mark.asyncio
async def test_id_token_profile(bridge):
    """ID tokens go to tokeninfo; string booleans are understood."""
    claims = {
        "aud": "web-client.apps.googleusercontent.com",
        "sub": "1098765",
        "email": "ada@example.com",
        "email_verified": "true",
    }
    with patch('httpx.AsyncClient') as mock_client:
        mock_get = AsyncMock(return_value=_response(claims))
        mock_client.return_value.__aenter__.return_value.get = mock_get

        profile = await bridge.fetch_profile_by_id_token("eyJ.id.token")

    assert profile.subject == "1098765"
    assert profile.email_verified is True
    assert mock_get.call_args[1]["params"] == {"id_token": "eyJ.id.token"}


@pytest.mark.asyncio
async def test_id_token_for_other_audience_rejected(bridge):
    claims = {"aud": "someone-else", "sub": "1098765", "email_verified": "false"}
    with patch('httpx.AsyncClient') as mock_client:
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(return_value=_response(claims))

        with pytest.raises(IdentityResponseError, match="another client"):
            await bridge.fetch_profile_by_id_token("eyJ.id.token")
