"""Exception hierarchy for the token service.

Two families share one base so the API layer can handle them centrally:

- OAuth errors (``OAuthServerError``) raised while answering a token request.
  Their ``to_dict`` follows the RFC 6749 error response shape and each carries
  an ``OAuthErrorKind`` so callers branch on the kind, not the class.
- Repository errors raised by token-record maintenance (augmentation).

Error codes follow pattern: [CATEGORY][NUMBER]
- OAU: OAuth token endpoint errors (001-099)
- TOK: Token record errors (100-199)
- USR: User errors (200-299)
"""

from __future__ import annotations

import enum
from typing import Any


class GrantBridgeException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with a client-safe message and metadata.

        Args:
            message: Client-safe error message
            code: Unique error code (e.g., "OAU001")
            status_code: HTTP status code (default: 400 Bad Request)
            details: Optional additional context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# OAUTH ERRORS (OAU001-099)
# ============================================================================

class OAuthErrorKind(str, enum.Enum):
    INVALID_REQUEST = "invalid_request"
    INVALID_CLIENT = "invalid_client"
    INVALID_SCOPE = "invalid_scope"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    SERVER_ERROR = "server_error"


class OAuthServerError(GrantBridgeException):
    """Base class for errors returned by the token endpoint."""

    kind: OAuthErrorKind = OAuthErrorKind.SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: str,
        error_type: str,
        status_code: int = 400,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, code=code, status_code=status_code, details=details)
        self.error_type = error_type
        self.hint = hint

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": self.error_type,
            "error_description": self.message,
        }
        if self.hint:
            payload["hint"] = self.hint
        return payload


class InvalidRequestError(OAuthServerError):
    """A required parameter is missing or unusable."""

    kind = OAuthErrorKind.INVALID_REQUEST

    def __init__(self, parameter: str, hint: str | None = None):
        super().__init__(
            message=(
                "The request is missing a required parameter, includes an invalid parameter value, "
                "includes a parameter more than once, or is otherwise malformed."
            ),
            code="OAU001",
            error_type="invalid_request",
            status_code=400,
            hint=hint or f"Check the `{parameter}` parameter",
            details={"parameter": parameter},
        )
        self.parameter = parameter


class InvalidClientError(OAuthServerError):
    """Client identifier does not resolve to a registered client."""

    kind = OAuthErrorKind.INVALID_CLIENT

    def __init__(self, used_basic_auth: bool = False):
        super().__init__(
            message="Client authentication failed",
            code="OAU002",
            error_type="invalid_client",
            status_code=401,
        )
        self.used_basic_auth = used_basic_auth


class InvalidScopeError(OAuthServerError):
    """Requested scope is unknown or not permitted for the grant."""

    kind = OAuthErrorKind.INVALID_SCOPE

    def __init__(self, scope: str):
        super().__init__(
            message="The requested scope is invalid, unknown, or malformed",
            code="OAU003",
            error_type="invalid_scope",
            status_code=400,
            hint=f"Check the `{scope}` scope",
            details={"scope": scope},
        )
        self.scope = scope


class InvalidCredentialsError(OAuthServerError):
    """The third-party token was readable but matched no user."""

    kind = OAuthErrorKind.INVALID_CREDENTIALS

    def __init__(self):
        super().__init__(
            message="The user credentials were incorrect.",
            code="OAU004",
            error_type="invalid_grant",
            status_code=401,
        )


class UnsupportedGrantTypeError(OAuthServerError):
    """No grant is registered for the requested grant_type."""

    kind = OAuthErrorKind.UNSUPPORTED_GRANT_TYPE

    def __init__(self, grant_type: str | None = None):
        super().__init__(
            message="The authorization grant type is not supported by the authorization server.",
            code="OAU005",
            error_type="unsupported_grant_type",
            status_code=400,
            hint="Check that all required parameters have been provided",
            details={"grant_type": grant_type} if grant_type else {},
        )


class UnauthorizedClientError(OAuthServerError):
    """The client is not registered for the requested grant type."""

    kind = OAuthErrorKind.UNAUTHORIZED_CLIENT

    def __init__(self, grant_type: str):
        super().__init__(
            message="The authenticated client is not authorized to use this authorization grant type.",
            code="OAU006",
            error_type="unauthorized_client",
            status_code=400,
            details={"grant_type": grant_type},
        )


class ServerError(OAuthServerError):
    """Token issuance failed for reasons the client cannot fix."""

    kind = OAuthErrorKind.SERVER_ERROR

    def __init__(self, hint: str | None = None):
        super().__init__(
            message="The authorization server encountered an unexpected condition which prevented it from fulfilling the request.",
            code="OAU099",
            error_type="server_error",
            status_code=500,
            hint=hint,
        )


class UniqueTokenIdentifierExhaustedError(ServerError):
    """Could not generate an unused token identifier."""

    def __init__(self):
        super().__init__(hint="Could not create unique access token identifier")


# ============================================================================
# TOKEN RECORD ERRORS (TOK100-199)
# ============================================================================

class TokenRecordError(GrantBridgeException):
    """Base class for persisted token record errors."""
    pass


class TokenRecordNotFoundError(TokenRecordError):
    """No access-token record exists for the identifier."""

    def __init__(self, token_identifier: str):
        super().__init__(
            message="Access token record not found",
            code="TOK100",
            status_code=404,
            details={"token_id": token_identifier},
        )
        self.token_identifier = token_identifier


class TokenRecordConflictError(TokenRecordError):
    """The record changed between read and write."""

    def __init__(self, token_identifier: str):
        super().__init__(
            message="Access token record was modified concurrently",
            code="TOK101",
            status_code=409,
            details={"token_id": token_identifier},
        )
        self.token_identifier = token_identifier


# ============================================================================
# USER ERRORS (USR200-299)
# ============================================================================

class UserNotFoundError(GrantBridgeException):
    """User does not exist."""

    def __init__(self, identifier: str | int | None = None):
        message = "User not found" if identifier is None else f"User '{identifier}' not found"
        super().__init__(
            message=message,
            code="USR200",
            status_code=404,
            details={"identifier": identifier} if identifier is not None else {},
        )
