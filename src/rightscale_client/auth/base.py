"""Base abstractions for authenticators."""
from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import requests
from requests import PreparedRequest
from requests.auth import AuthBase

from ..config import API_VERSION, INITIAL_REFRESH_SKEW
from ..dump import DumpFormat
from ..exceptions import AuthenticationError, ConfigError, TransportError
from ..http import DumpingTransport, endpoint

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class Authenticator(AuthBase, ABC):
    """Interface each authentication mechanism must implement.

    Instances are `requests` auth hooks, so they can be passed as ``auth=``
    to any session call as well as used directly through :meth:`sign`.
    """

    #: Whether the self-test probes the instance-facing API.
    instance_facing = False

    def __init__(self, *, transport: Any | None = None, dump: DumpFormat = DumpFormat.NONE) -> None:
        self.host = ""
        self._transport = transport if transport is not None else DumpingTransport(dump)

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        return self.sign(request)

    @abstractmethod
    def sign(self, request: PreparedRequest) -> PreparedRequest:
        """Add the credentials to the request, refreshing them first if needed."""

    def set_host(self, host: str) -> None:
        """Bind the host used to create sessions and probe credentials."""
        self.host = host

    def can_authenticate(self) -> None:
        """Raise unless a signed test request to the API succeeds."""
        check_authentication(self, self._transport, self.host, instance=self.instance_facing)

    def enable_dump(self, dump_format: DumpFormat) -> None:
        enable = getattr(self._transport, "enable_dump", None)
        if enable is not None:
            enable(dump_format)

    def set_verify(self, verify: bool | str) -> None:
        """Set TLS verification for login and probe requests."""
        if hasattr(self._transport, "verify"):
            self._transport.verify = verify


class RefreshingAuthenticator(Authenticator):
    """Authenticator whose credentials expire and are refreshed on demand.

    The deadline check, the refresh and the signing run under one lock so
    that concurrent callers racing past an expired deadline trigger a single
    login round trip. The deadline only moves after a successful refresh.
    """

    def __init__(
        self,
        *,
        transport: Any | None = None,
        dump: DumpFormat = DumpFormat.NONE,
        clock: Clock = time.monotonic,
    ) -> None:
        super().__init__(transport=transport, dump=dump)
        self._clock = clock
        self._lock = threading.Lock()
        self.refresh_at = clock() - INITIAL_REFRESH_SKEW.total_seconds()

    def sign(self, request: PreparedRequest) -> PreparedRequest:
        with self._lock:
            if self._clock() > self.refresh_at:
                self._refresh(request)
            self._apply(request)
        return request

    def set_host(self, host: str) -> None:
        with self._lock:
            self.host = host

    @abstractmethod
    def _refresh(self, request: PreparedRequest) -> None:
        """Renew the credentials and advance `refresh_at`."""

    @abstractmethod
    def _apply(self, request: PreparedRequest) -> None:
        """Attach the current credentials to the request."""

    def _send(self, login_request: requests.Request | PreparedRequest) -> requests.Response:
        try:
            return self._transport.send(login_request)
        except requests.RequestException as exc:
            reason = str(exc).strip() or exc.__class__.__name__
            raise TransportError(f"Authentication failed: {reason}", details=reason) from exc


def check_authentication(
    authenticator: Authenticator,
    transport: Any,
    host: str,
    *,
    instance: bool = False,
    path: str | None = None,
    api_version: str = API_VERSION,
) -> None:
    """Make a signed GET to a known authenticated endpoint, raise unless it returns 200."""

    if not host:
        raise ConfigError("missing host information")
    if path is None:
        path = "api/user_data" if instance else "api/sessions"
    probe = requests.Request(
        "GET", endpoint(host, path), headers={"X-Api-Version": api_version}
    ).prepare()
    authenticator.sign(probe)
    try:
        response = transport.send(probe)
    except requests.RequestException as exc:
        reason = str(exc).strip() or exc.__class__.__name__
        raise TransportError(f"Authentication check failed: {reason}", details=reason) from exc
    if response.status_code != 200:
        raise authentication_failure(response, prefix="Authentication check failed")
    logger.debug("Credentials accepted by %s", probe.url)


def authentication_failure(
    response: requests.Response, *, prefix: str = "Authentication failed"
) -> AuthenticationError:
    """Describe a rejected login or probe response."""

    status = f"{response.status_code} {response.reason or ''}".rstrip()
    body = response.text
    message = f"{prefix}: {status}"
    if body:
        message += f": {body[:200]}"
    return AuthenticationError(message, status_code=response.status_code, details=body)
