"""Grant types registered with the authorization server."""
from .google_access_token import GRANT_IDENTIFIER as GOOGLE_ACCESS_TOKEN, GoogleAccessTokenGrant

__all__ = ["GOOGLE_ACCESS_TOKEN", "GoogleAccessTokenGrant"]
