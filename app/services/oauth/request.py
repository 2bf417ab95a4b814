"""Framework-neutral view of an inbound token request."""
from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TokenRequest:
    """Form parameters and headers of one token-endpoint call.

    Header names are matched case-insensitively.
    """

    params: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)

    def get_parameter(self, name: str, default: str | None = None) -> str | None:
        value = self.params.get(name)
        if value is None or value == "":
            return default
        return value

    def get_header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    @property
    def grant_type(self) -> str | None:
        return self.get_parameter("grant_type")

    def get_basic_auth_credentials(self) -> tuple[str | None, str | None]:
        """Return ``(username, password)`` from an HTTP Basic header.

        Anything other than a well-formed Basic header yields ``(None, None)``.
        """
        header = self.get_header("Authorization")
        if not header:
            return None, None
        scheme, _, encoded = header.partition(" ")
        if scheme.lower() != "basic" or not encoded.strip():
            return None, None
        try:
            decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None, None
        if ":" not in decoded:
            return None, None
        username, password = decoded.split(":", 1)
        return username or None, password or None
