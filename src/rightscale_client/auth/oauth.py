"""OAuth refresh token authentication."""

from __future__ import annotations

import logging
import math
import re
from typing import Any

import requests
from requests import PreparedRequest

from ..config import API_VERSION, DEFAULT_HOST
from ..dump import DumpFormat
from ..exceptions import ProtocolError
from ..http import endpoint
from .base import RefreshingAuthenticator, authentication_failure

logger = logging.getLogger(__name__)

# Plain decimal seconds, as written by the token endpoint.
_DURATION_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def parse_token_response(payload: Any) -> tuple[str, float]:
    """Extract the access token and its lifetime in seconds from a token response."""

    if not isinstance(payload, dict):
        raise ProtocolError(f"Unexpected auth response: {payload!r}")
    access_token = payload.get("access_token")
    if not isinstance(access_token, str):
        raise ProtocolError(f"Unexpected auth response: {payload!r}")
    expires_in = payload.get("expires_in")
    message = f"Authentication failed (failed to parse token duration): {expires_in!r}"
    if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float, str)):
        raise ProtocolError(message)
    if isinstance(expires_in, str) and not _DURATION_PATTERN.fullmatch(expires_in):
        raise ProtocolError(message)
    try:
        ttl = float(expires_in)
    except OverflowError as exc:
        raise ProtocolError(message) from exc
    if not math.isfinite(ttl):
        raise ProtocolError(message)
    return access_token, ttl


class OAuthAuthenticator(RefreshingAuthenticator):
    """Exchange a long-lived refresh token for short-lived access tokens.

    The refresh token is found in the dashboard under Settings > Account
    Settings > API Credentials. Access tokens are renewed at half their
    lifetime. Failed exchanges are not retried.
    """

    def __init__(
        self,
        refresh_token: str,
        *,
        transport: Any | None = None,
        dump: DumpFormat = DumpFormat.NONE,
        **kwargs: Any,
    ) -> None:
        super().__init__(transport=transport, dump=dump, **kwargs)
        self._refresh_token = refresh_token
        self.access_token = ""

    def build_login_request(self, host: str) -> requests.Request:
        return requests.Request(
            "POST",
            endpoint(host or DEFAULT_HOST, "api/oauth2"),
            headers={"X-API-Version": API_VERSION},
            json={"grant_type": "refresh_token", "refresh_token": self._refresh_token},
        )

    def _refresh(self, request: PreparedRequest) -> None:
        response = self._send(self.build_login_request(self.host))
        if response.status_code != 200:
            raise authentication_failure(response)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProtocolError(
                f"Authentication failed (failed to load response JSON): {exc}",
                details=response.text,
            ) from exc
        access_token, ttl = parse_token_response(payload)
        self.access_token = access_token
        self.refresh_at = self._clock() + ttl / 2
        logger.info("Refreshed OAuth access token (expires in %ss)", ttl)

    def _apply(self, request: PreparedRequest) -> None:
        request.headers["Authorization"] = f"Bearer {self.access_token}"
