"""HTTP utilities for RightScale API access."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import requests
from requests import PreparedRequest, Response, Session
from requests.auth import AuthBase

from .config import RESPONSE_HEADER_TIMEOUT, USER_AGENT
from .dump import DumpFormat, dump_request, dump_response
from .exceptions import ProtocolError, RedirectError, RequestError


_LOOPBACK_PREFIXES = ("localhost", "127.0.0.1")


@dataclass(slots=True)
class HttpResponse:
    """Typed response wrapper with helper accessors."""

    status_code: int
    data: Any
    headers: Mapping[str, str]


def endpoint(host: str, path: str) -> str:
    """Compute the URL of `path` on `host`, using plain HTTP for loopback hosts."""

    if not host.startswith(("http://", "https://")):
        scheme = "http" if host.startswith(_LOOPBACK_PREFIXES) else "https"
        host = f"{scheme}://{host}"
    if not host.endswith("/"):
        host += "/"
    return host + path.lstrip("/")


def replace_host(request: PreparedRequest, host: str) -> None:
    """Point a prepared request at `host`, keeping scheme, path and query."""

    parts = urlsplit(request.url or "")
    request.url = urlunsplit(parts._replace(netloc=host))


def extract_redirect_host(response: Response) -> str:
    """Return the host a 3xx login response redirects to, or "" if none."""

    if not 300 <= response.status_code < 399:
        return ""
    location = response.headers.get("Location", "")
    if not location:
        return ""
    if location.startswith(":"):
        raise RedirectError(f"invalid Location header '{location}': missing protocol scheme")
    try:
        parts = urlsplit(location)
        parts.port  # raises on a malformed port
    except ValueError as exc:
        raise RedirectError(f"invalid Location header '{location}': {exc}") from exc
    return parts.netloc.rpartition("@")[2]


class DumpingTransport:
    """Send login and probe requests, optionally dumping the traffic.

    Redirects are never followed so authenticators can inspect them, and every
    request is bounded by the response header timeout.
    """

    def __init__(
        self,
        dump: DumpFormat = DumpFormat.NONE,
        *,
        session: Session | None = None,
        timeout: float = RESPONSE_HEADER_TIMEOUT,
        verify: bool | str = True,
    ) -> None:
        self.dump = dump
        self.timeout = timeout
        self.verify = verify
        self._session = session or Session()

    def enable_dump(self, dump: DumpFormat) -> None:
        self.dump = dump

    def send(self, request: requests.Request | PreparedRequest) -> Response:
        prepared = request.prepare() if isinstance(request, requests.Request) else request
        prepared.headers["User-Agent"] = USER_AGENT
        dump = self.dump
        if dump.is_verbose:
            dump_request(dump, prepared)
        response = self._session.send(
            prepared,
            timeout=self.timeout,
            allow_redirects=False,
            verify=self.verify,
        )
        if dump.is_verbose:
            dump_response(dump, response, prepared)
        return response

    def close(self) -> None:
        self._session.close()


def ensure_success(response: Response) -> None:
    """Raise `RequestError` if the response signals a failure."""

    if 200 <= response.status_code < 300:
        return
    message = f"RightScale API error {response.status_code}: {response.text[:200]}"
    raise RequestError(message, status_code=response.status_code, details=response.text)


def parse_json(response: Response) -> Any:
    """Parse JSON with helpful error context."""

    try:
        return response.json()
    except ValueError as exc:
        raise ProtocolError("Response did not contain valid JSON", details=response.text) from exc


def request(
    session: Session,
    method: str,
    url: str,
    *,
    params: Mapping[str, str] | None = None,
    headers: MutableMapping[str, str] | None = None,
    json_payload: Mapping[str, Any] | None = None,
    auth: AuthBase | None = None,
    expect_json: bool = True,
    timeout: float | tuple[float, float] | None = None,
    verify: bool | str = True,
) -> HttpResponse:
    """Make a signed request and return a parsed response envelope."""

    response = session.request(
        method=method,
        url=url,
        params=params,
        headers=headers,
        json=json_payload,
        auth=auth,
        timeout=timeout,
        verify=verify,
    )
    ensure_success(response)

    data: Any = None
    if response.content:
        data = parse_json(response) if expect_json else response.text

    return HttpResponse(status_code=response.status_code, data=data, headers=response.headers)
