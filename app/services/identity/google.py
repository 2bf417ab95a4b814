"""Google identity bridge.

Access tokens are checked against the OpenID userinfo endpoint, ID tokens
against the tokeninfo endpoint. Google performs the signature/expiry checks;
this module only interprets the answers.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.config import settings

from .exceptions import IdentityResponseError, IdentityTransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoogleProfile:
    subject: str
    email: str | None = None
    email_verified: bool = False
    name: str | None = None
    picture: str | None = None


def _as_bool(value: Any) -> bool:
    # tokeninfo returns "true"/"false" strings, userinfo returns JSON booleans
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


class GoogleIdentityBridge:
    """Resolves Google access and ID tokens into ``GoogleProfile`` objects."""

    def __init__(
        self,
        userinfo_url: str | None = None,
        tokeninfo_url: str | None = None,
        client_id: str | None = None,
        timeout: float | None = None,
    ):
        self.userinfo_url = userinfo_url or settings.GOOGLE_USERINFO_URL
        self.tokeninfo_url = tokeninfo_url or settings.GOOGLE_TOKENINFO_URL
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.timeout = timeout or settings.GOOGLE_HTTP_TIMEOUT

    async def fetch_profile_by_access_token(self, access_token: str) -> GoogleProfile:
        """
        Fetch the profile owning a Google access token.

        Raises:
            IdentityTransportError: Google unreachable
            IdentityResponseError: token rejected or response unusable
        """
        headers = {"Authorization": f"Bearer {access_token}"}
        data = await self._get_json(self.userinfo_url, headers=headers)
        return self._to_profile(data)

    async def fetch_profile_by_id_token(self, id_token: str) -> GoogleProfile:
        """
        Verify a Google ID token and return its claims as a profile.

        When a Google client id is configured the token audience must match it.
        """
        data = await self._get_json(self.tokeninfo_url, params={"id_token": id_token})
        if self.client_id and data.get("aud") != self.client_id:
            logger.warning("Google ID token audience mismatch | aud=%s", data.get("aud"))
            raise IdentityResponseError("ID token was issued for another client")
        return self._to_profile(data)

    async def _get_json(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        async with httpx.AsyncClient() as client:
            try:
                response = await client.get(url, headers=headers, params=params, timeout=self.timeout)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.info(f"Google rejected token | status={e.response.status_code}")
                raise IdentityResponseError(f"Google token lookup failed: {e.response.status_code}") from e
            except httpx.RequestError as e:
                logger.error(f"Google token lookup request failed: {str(e)}")
                raise IdentityTransportError("Failed to connect to Google") from e
        try:
            data = response.json()
        except ValueError as e:
            raise IdentityResponseError("Google returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise IdentityResponseError("Google returned an unexpected payload")
        return data

    @staticmethod
    def _to_profile(data: dict[str, Any]) -> GoogleProfile:
        subject = data.get("sub") or data.get("id")
        if not subject:
            raise IdentityResponseError("Google profile has no subject")
        return GoogleProfile(
            subject=str(subject),
            email=data.get("email"),
            email_verified=_as_bool(data.get("email_verified", data.get("verified_email", False))),
            name=data.get("name"),
            picture=data.get("picture"),
        )
