"""Static OAuth access token authentication."""

from __future__ import annotations

from typing import Any

from requests import PreparedRequest

from ..dump import DumpFormat
from .base import Authenticator


class TokenAuthenticator(Authenticator):
    """Apply an already issued access token.

    Use this when the OAuth handshake has happened elsewhere; the host is
    only used by :meth:`can_authenticate`.
    """

    def __init__(
        self, access_token: str, *, transport: Any | None = None, dump: DumpFormat = DumpFormat.NONE
    ) -> None:
        super().__init__(transport=transport, dump=dump)
        self.access_token = access_token

    def sign(self, request: PreparedRequest) -> PreparedRequest:
        request.headers["Authorization"] = f"Bearer {self.access_token}"
        return request
