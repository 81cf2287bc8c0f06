"""Self-Service authentication layered on top of another authenticator."""

from __future__ import annotations

import logging
from typing import Any

import requests
from requests import PreparedRequest

from ..config import SELF_SERVICE_API_VERSION, SELF_SERVICE_HOST_LABEL, SESSION_LIFETIME
from ..dump import DumpFormat
from ..exceptions import ConfigError
from ..http import endpoint, replace_host
from .base import Authenticator, RefreshingAuthenticator, check_authentication

logger = logging.getLogger(__name__)


def self_service_host(host: str) -> str:
    """Derive the Self-Service host from a core API host.

    ``us-3.rightscale.com`` becomes ``us-selfservice-3.rightscale.com``. With
    more than two dash segments the second-to-last one is replaced, so
    ``a-b-c`` becomes ``a-selfservice-c``. Hosts whose first label has no dash
    are returned unchanged.
    """

    labels = host.split(".")
    elems = labels[0].split("-")
    if len(elems) < 2:
        return host
    if len(elems) == 2:
        elems.insert(-1, SELF_SERVICE_HOST_LABEL)
    else:
        elems[-2] = SELF_SERVICE_HOST_LABEL
    return ".".join(["-".join(elems), *labels[1:]])


class SelfServiceAuthenticator(RefreshingAuthenticator):
    """Wrap a core authenticator and maintain a Self-Service session too.

    Signing delegates to the inner authenticator, then points the request at
    the Self-Service host. The Self-Service session has its own deadline.
    """

    def __init__(
        self,
        inner: Authenticator,
        account_id: int,
        *,
        transport: Any | None = None,
        dump: DumpFormat = DumpFormat.NONE,
        **kwargs: Any,
    ) -> None:
        super().__init__(transport=transport, dump=dump, **kwargs)
        self.inner = inner
        self.account_id = account_id

    def set_host(self, host: str) -> None:
        """Bind the core host; the Self-Service host is computed from it."""
        self.inner.set_host(host)
        super().set_host(self_service_host(host))

    def can_authenticate(self) -> None:
        check_authentication(
            self,
            self._transport,
            self.host,
            path=f"api/catalog/accounts/{self.account_id}/user_preferences",
            api_version=SELF_SERVICE_API_VERSION,
        )

    def enable_dump(self, dump_format: DumpFormat) -> None:
        super().enable_dump(dump_format)
        self.inner.enable_dump(dump_format)

    def set_verify(self, verify: bool | str) -> None:
        super().set_verify(verify)
        self.inner.set_verify(verify)

    def _refresh(self, request: PreparedRequest) -> None:
        if not self.host:
            raise ConfigError("missing host information")
        bootstrap = requests.Request(
            "GET",
            endpoint(self.host, "api/catalog/new_session"),
            params={"account_id": self.account_id},
            headers={"Content-Type": "application/json"},
        ).prepare()
        self.inner.sign(bootstrap)
        # a redirected inner login re-points the request at the core host
        replace_host(bootstrap, self.host)
        response = self._send(bootstrap)
        if response.status_code >= 400:
            logger.warning(
                "Self-Service session bootstrap on %s returned %s", self.host, response.status_code
            )
        self.refresh_at = self._clock() + SESSION_LIFETIME.total_seconds()
        logger.info("Created Self-Service session on %s (account %s)", self.host, self.account_id)

    def _apply(self, request: PreparedRequest) -> None:
        self.inner.sign(request)
        request.headers["X-Api-Version"] = SELF_SERVICE_API_VERSION
        replace_host(request, self.host)


def wrap_self_service(inner: Authenticator, account_id: int, **kwargs: Any) -> Authenticator:
    """Return `inner` wrapped for Self-Service, unless it already is."""

    if isinstance(inner, SelfServiceAuthenticator):
        return inner
    return SelfServiceAuthenticator(inner, account_id, **kwargs)
