"""Login request factories for session based authentication."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import requests

from ..config import API_VERSION, DEFAULT_HOST
from ..http import endpoint


def account_href(account_id: int) -> str:
    return f"/api/accounts/{account_id}"


def _login_request(host: str, path: str, payload: dict[str, str]) -> requests.Request:
    return requests.Request(
        "POST",
        endpoint(host or DEFAULT_HOST, path),
        headers={"X-API-Version": API_VERSION},
        json=payload,
    )


class LoginRequestBuilder(ABC):
    """Build the HTTP request that creates a session on a given host."""

    #: Whether the resulting session talks to the instance-facing API.
    instance_facing = False

    @abstractmethod
    def build_login_request(self, host: str) -> requests.Request:
        """Return the login request for `host` (the default host if empty)."""


@dataclass(frozen=True, slots=True)
class PasswordLoginBuilder(LoginRequestBuilder):
    """Create sessions from a user's email and password."""

    username: str
    password: str = field(repr=False)
    account_id: int

    def build_login_request(self, host: str) -> requests.Request:
        return _login_request(
            host,
            "api/sessions",
            {
                "email": self.username,
                "password": self.password,
                "account_href": account_href(self.account_id),
            },
        )


@dataclass(frozen=True, slots=True)
class InstanceLoginBuilder(LoginRequestBuilder):
    """Create sessions from the instance-facing API token (RS_API_TOKEN)."""

    instance_facing = True

    token: str = field(repr=False)
    account_id: int

    def build_login_request(self, host: str) -> requests.Request:
        return _login_request(
            host,
            "api/session/instance",
            {"instance_token": self.token, "account_href": account_href(self.account_id)},
        )
