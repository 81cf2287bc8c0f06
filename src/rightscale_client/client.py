"""High-level RightScale REST client."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from .auth.base import Authenticator
from .auth.proxy import ProxySecretAuthenticator
from .config import API_VERSION, RLL_SECRET_PATH, ClientConfig
from .dump import DumpFormat
from .exceptions import RequestError
from .http import HttpResponse, endpoint
from .http import request as http_request

logger = logging.getLogger(__name__)


class RightScaleClient:
    """Send authenticated requests to a RightScale API host.

    The authenticator is bound to `host` on construction. With
    ``check_auth=True`` the credentials are probed immediately so bad
    credentials fail here rather than on the first real request.
    """

    def __init__(
        self,
        *,
        host: str,
        authenticator: Authenticator | None = None,
        session: requests.Session | None = None,
        dump: DumpFormat = DumpFormat.NONE,
        verify_ssl: bool | str = True,
        timeout: float = 30.0,
        api_version: str = API_VERSION,
        default_headers: Mapping[str, str] | None = None,
        unsecure: bool = False,
        check_auth: bool = False,
    ) -> None:
        self.config = ClientConfig(
            host=host,
            verify_ssl=verify_ssl,
            timeout=timeout,
            api_version=api_version,
            unsecure=unsecure,
            default_headers=default_headers,
        )
        self._suppress_insecure_warning_if_needed()
        self._session = session or requests.Session()
        self.auth = authenticator
        if authenticator is not None:
            authenticator.set_host(host)
            authenticator.set_verify(verify_ssl)
            if dump.is_verbose:
                authenticator.enable_dump(dump)
            if check_auth:
                authenticator.can_authenticate()

    @classmethod
    def from_proxy_secret(
        cls, path: str | Path = RLL_SECRET_PATH, **kwargs: Any
    ) -> RightScaleClient:
        """Build a client that relays requests through the local RightLink agent."""

        authenticator = ProxySecretAuthenticator.from_secret_file(path)
        kwargs.setdefault("unsecure", True)
        return cls(host=authenticator.host, authenticator=authenticator, **kwargs)

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> RightScaleClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Public API --------------------------------------------------------------
    @property
    def host(self) -> str:
        return self.config.host

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json_payload: Mapping[str, Any] | None = None,
    ) -> Any:
        url = self._resolve_url(path)
        self._log_request(method, url)
        try:
            response: HttpResponse = http_request(
                self._session,
                method,
                url,
                params=params,
                headers=self.config.resolved_headers(),
                json_payload=json_payload,
                auth=self.auth,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as exc:
            reason = str(exc).strip() or exc.__class__.__name__
            raise RequestError(
                f"Failed to communicate with RightScale API: {reason}", details=reason
            ) from exc
        return response.data

    def close(self) -> None:
        self._session.close()

    # Internal helpers -------------------------------------------------------
    def _resolve_url(self, path: str) -> str:
        parsed = urlparse(path)
        if parsed.scheme and parsed.netloc:
            return path
        host = self.config.host
        if self.config.unsecure and not host.startswith(("http://", "https://")):
            host = f"http://{host}"
        return endpoint(host, path)

    def _log_request(self, method: str, url: str) -> None:
        logger.info(
            "RightScale request %s %s (auth=%s)",
            method.upper(),
            url,
            type(self.auth).__name__ if self.auth else "none",
        )

    def _suppress_insecure_warning_if_needed(self) -> None:
        if isinstance(self.config.verify_ssl, bool) and not self.config.verify_ssl:
            urllib3.disable_warnings(InsecureRequestWarning)
