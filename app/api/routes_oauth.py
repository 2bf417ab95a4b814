"""
OAuth 2.0 token endpoint.

Endpoints:
- POST /oauth/token       - Exchange a grant for access/refresh tokens
- GET  /oauth/grant-types - List enabled grant types

Only handles the HTTP layer; grant logic lives in app.services.oauth.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models import schemas
from app.services.identity import GoogleIdentityBridge
from app.services.oauth import TokenRequest
from app.services.oauth.factory import create_authorization_server

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/oauth", tags=["oauth"])


def get_identity_bridge() -> GoogleIdentityBridge:
    """Google identity bridge configured from settings (overridable in tests)."""
    return GoogleIdentityBridge()


@router.post(
    "/token",
    response_model=schemas.TokenOut,
    responses={400: {"model": schemas.OAuthErrorOut}, 401: {"model": schemas.OAuthErrorOut}},
)
async def issue_token(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    google: Annotated[GoogleIdentityBridge, Depends(get_identity_bridge)],
) -> JSONResponse:
    """
    Token endpoint.

    Form parameters for ``grant_type=google_access_token``:
        client_id: Client identifier (or HTTP Basic username)
        scope: Space-delimited scopes (optional)
        token: Google access token

    Returns:
        {
            "token_type": "Bearer",
            "expires_in": 3600,
            "access_token": "eyJ...",
            "refresh_token": "eyJ..."
        }
    """
    form = await request.form()
    token_request = TokenRequest(
        params={key: value for key, value in form.items() if isinstance(value, str)},
        headers=dict(request.headers),
    )

    server = create_authorization_server(db, google=google)
    response = await server.respond_to_access_token_request(token_request)

    logger.info("Token issued | grant_type=%s", token_request.grant_type)
    return JSONResponse(
        content=response.to_dict(),
        headers={"Cache-Control": "no-store", "Pragma": "no-cache"},
    )


@router.get("/grant-types", response_model=schemas.GrantTypesOut)
async def list_grant_types(db: Annotated[Session, Depends(get_db)]) -> dict:
    """List grant types the token endpoint accepts."""
    server = create_authorization_server(db)
    return {"grant_types": server.grant_types}
