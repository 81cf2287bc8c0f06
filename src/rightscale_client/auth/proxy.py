"""Authentication through the local RightLink 10 agent."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from requests import PreparedRequest

from ..config import RLL_SECRET_PATH, load_proxy_secret
from ..dump import DumpFormat
from .base import Authenticator

SECRET_HEADER = "X-RLL-Secret"


class ProxySecretAuthenticator(Authenticator):
    """Sign requests relayed through the agent with its shared secret.

    The agent holds the real credentials and authenticates upstream.
    """

    instance_facing = True

    def __init__(
        self, secret: str, *, transport: Any | None = None, dump: DumpFormat = DumpFormat.NONE
    ) -> None:
        super().__init__(transport=transport, dump=dump)
        self._secret = secret

    @classmethod
    def from_secret_file(
        cls, path: str | Path = RLL_SECRET_PATH, **kwargs: Any
    ) -> ProxySecretAuthenticator:
        """Load the agent secret and bind the authenticator to the agent's local port."""

        config = load_proxy_secret(path)
        authenticator = cls(config.secret, **kwargs)
        authenticator.set_host(config.host)
        return authenticator

    def sign(self, request: PreparedRequest) -> PreparedRequest:
        request.headers[SECRET_HEADER] = self._secret
        return request
