"""Session cookie authentication (email/password or instance API token)."""

from __future__ import annotations

import logging
from typing import Any

from requests import PreparedRequest
from requests.cookies import RequestsCookieJar

from ..config import SESSION_LIFETIME
from ..dump import DumpFormat
from ..http import extract_redirect_host, replace_host
from .base import RefreshingAuthenticator, authentication_failure
from .builders import InstanceLoginBuilder, LoginRequestBuilder, PasswordLoginBuilder

logger = logging.getLogger(__name__)


class CookieSessionAuthenticator(RefreshingAuthenticator):
    """Sign requests with a global session cookie, creating sessions as needed.

    Sessions are created with the login request of `builder`. When the login
    endpoint redirects to another data-center host the authenticator rebinds
    to that host, logs in again there and points the request being signed
    at it as well.
    """

    def __init__(
        self,
        builder: LoginRequestBuilder,
        account_id: int,
        *,
        transport: Any | None = None,
        dump: DumpFormat = DumpFormat.NONE,
        **kwargs: Any,
    ) -> None:
        super().__init__(transport=transport, dump=dump, **kwargs)
        self.builder = builder
        self.account_id = account_id
        self.instance_facing = builder.instance_facing
        self.cookies = RequestsCookieJar()

    def _refresh(self, request: PreparedRequest) -> None:
        response = self._send(self.builder.build_login_request(self.host))
        host = extract_redirect_host(response)
        if host:
            logger.debug("Login redirected from %s to %s", self.host or "default host", host)
            login_request = self.builder.build_login_request(host)
            self.host = host
            replace_host(request, host)
            response = self._send(login_request)
        if response.status_code != 204:
            raise authentication_failure(response)
        jar = RequestsCookieJar()
        jar.update(response.cookies)
        self.cookies = jar
        self.refresh_at = self._clock() + SESSION_LIFETIME.total_seconds()
        logger.info("Created RightScale session on %s (account %s)", self.host, self.account_id)

    def _apply(self, request: PreparedRequest) -> None:
        pairs = [f"{cookie.name}={cookie.value}" for cookie in self.cookies]
        if pairs:
            existing = request.headers.get("Cookie")
            if existing:
                pairs.insert(0, existing)
            request.headers["Cookie"] = "; ".join(pairs)
        request.headers["X-Account"] = str(self.account_id)


def basic_authenticator(
    username: str, password: str, account_id: int, **kwargs: Any
) -> CookieSessionAuthenticator:
    """Authenticator creating sessions from an email and password."""

    builder = PasswordLoginBuilder(username=username, password=password, account_id=account_id)
    return CookieSessionAuthenticator(builder, account_id, **kwargs)


def instance_authenticator(token: str, account_id: int, **kwargs: Any) -> CookieSessionAuthenticator:
    """Authenticator creating sessions from the instance-facing API token.

    This is the token RightLink exposes to instances as ``RS_API_TOKEN``.
    """

    builder = InstanceLoginBuilder(token=token, account_id=account_id)
    return CookieSessionAuthenticator(builder, account_id, **kwargs)
