"""Pydantic schemas for API requests and responses.

Sub-modules:
- oauth: Token endpoint schemas
"""
from .oauth import (
    GrantTypesOut,
    OAuthErrorOut,
    TokenOut,
)

__all__ = [
    "GrantTypesOut",
    "OAuthErrorOut",
    "TokenOut",
]
