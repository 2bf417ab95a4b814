"""Identity bridge: turns third-party tokens into verified profiles.

Providers:
- Google (userinfo for access tokens, tokeninfo for ID tokens)
"""
from .exceptions import (
    IdentityProviderError,
    IdentityResponseError,
    IdentityTransportError,
)
from .google import GoogleIdentityBridge, GoogleProfile

__all__ = [
    # Exceptions
    "IdentityProviderError",
    "IdentityResponseError",
    "IdentityTransportError",
    # Google
    "GoogleIdentityBridge",
    "GoogleProfile",
]
