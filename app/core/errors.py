import logging
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.exceptions import GrantBridgeException, InvalidClientError, OAuthServerError

logger = logging.getLogger("app.errors")


def register_error_handlers(app):
    @app.exception_handler(OAuthServerError)
    async def oauth_error(request: Request, exc: OAuthServerError):
        logger.info("OAuth error %s kind=%s path=%s", exc.code, exc.kind.value, request.url.path)
        headers = {"Cache-Control": "no-store"}
        if isinstance(exc, InvalidClientError) and exc.used_basic_auth:
            headers["WWW-Authenticate"] = 'Basic realm="OAuth"'
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(GrantBridgeException)
    async def application_error(request: Request, exc: GrantBridgeException):
        logger.info("Application error %s path=%s", exc.code, request.url.path)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):  # noqa: BLE001
        correlation_id = uuid.uuid4().hex
        logger.exception("Unhandled error cid=%s path=%s method=%s", correlation_id, request.url.path, request.method)
        return JSONResponse(status_code=500, content={"detail": "Internal server error", "cid": correlation_id})

    return app
