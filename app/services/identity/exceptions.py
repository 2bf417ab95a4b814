"""Identity bridge exceptions."""


class IdentityProviderError(Exception):
    """Raised when a third-party token cannot be turned into a profile."""


class IdentityTransportError(IdentityProviderError):
    """Raised when the identity provider cannot be reached."""


class IdentityResponseError(IdentityProviderError):
    """Raised when the provider rejects the token or returns an unusable body."""
