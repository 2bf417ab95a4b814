"""Token endpoint dispatcher: routes a request to the grant named by ``grant_type``."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from app.core.exceptions import UnsupportedGrantTypeError
from app.services.oauth.request import TokenRequest
from app.services.oauth.response import BearerTokenResponse

logger = logging.getLogger(__name__)


class Grant(Protocol):
    @property
    def identifier(self) -> str:
        ...

    async def respond_to_access_token_request(
        self,
        request: TokenRequest,
        response: BearerTokenResponse,
        access_token_ttl: timedelta,
    ) -> BearerTokenResponse:
        ...


@dataclass(frozen=True)
class _EnabledGrant:
    grant: Grant
    access_token_ttl: timedelta


class UnitOfWork(Protocol):
    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


class AuthorizationServer:
    """
    Dispatch token requests to enabled grants.

    When a ``unit_of_work`` is given, everything a grant writes is committed
    once the response is built and rolled back if the grant raises, so a
    failed exchange never leaves a half-issued token pair behind.
    """

    def __init__(
        self,
        default_access_token_ttl: timedelta = timedelta(hours=1),
        unit_of_work: UnitOfWork | None = None,
    ):
        self.default_access_token_ttl = default_access_token_ttl
        self.unit_of_work = unit_of_work
        self._grants: dict[str, _EnabledGrant] = {}

    def enable_grant_type(self, grant: Grant, access_token_ttl: timedelta | None = None) -> None:
        ttl = access_token_ttl or self.default_access_token_ttl
        self._grants[grant.identifier] = _EnabledGrant(grant, ttl)
        logger.info("Enabled grant type %s (access ttl=%ss)", grant.identifier, int(ttl.total_seconds()))

    @property
    def grant_types(self) -> list[str]:
        return sorted(self._grants)

    async def respond_to_access_token_request(self, request: TokenRequest) -> BearerTokenResponse:
        grant_type = request.grant_type
        enabled = self._grants.get(grant_type) if grant_type else None
        if enabled is None:
            raise UnsupportedGrantTypeError(grant_type)
        try:
            response = await enabled.grant.respond_to_access_token_request(
                request,
                BearerTokenResponse(),
                enabled.access_token_ttl,
            )
            if self.unit_of_work is not None:
                self.unit_of_work.commit()
        except Exception:
            if self.unit_of_work is not None:
                self.unit_of_work.rollback()
            raise
        return response
