"""Custom exception hierarchy for the RightScale client."""
from __future__ import annotations

from typing import Any


class RightScaleError(RuntimeError):
    """Base error for RightScale failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ConfigError(RightScaleError):
    """Raised when a credential source or client setting is malformed."""


class TransportError(RightScaleError):
    """Raised when a login or probe endpoint cannot be reached."""


class AuthenticationError(RightScaleError):
    """Raised when a login or probe endpoint rejects the credentials."""


class ProtocolError(RightScaleError):
    """Raised when a token response is malformed or incomplete."""


class RedirectError(RightScaleError):
    """Raised when a redirect response carries an unparsable Location header."""


class RequestError(RightScaleError):
    """Raised when an API request cannot be fulfilled."""
