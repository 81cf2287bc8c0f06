"""Configuration helpers for the RightScale client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from .exceptions import ConfigError

CLIENT_VERSION = "0.1.0"
USER_AGENT = f"rightscale-client/{CLIENT_VERSION}"

DEFAULT_HOST = "us-3.rightscale.com"
API_VERSION = "1.5"
SELF_SERVICE_API_VERSION = "1.0"
SELF_SERVICE_HOST_LABEL = "selfservice"

SESSION_LIFETIME = timedelta(hours=2)
# Fresh authenticators start out this far past their deadline.
INITIAL_REFRESH_SKEW = timedelta(minutes=2)
RESPONSE_HEADER_TIMEOUT = 20.0

RLL_SECRET_PATH = "/var/run/rightlink/secret"
RLL_PORT_KEY = "RS_RLL_PORT"
RLL_SECRET_KEY = "RS_RLL_SECRET"


@dataclass(slots=True)
class ClientConfig:
    """Typed configuration for `RightScaleClient`."""

    host: str
    verify_ssl: bool | str = True
    timeout: float = 30.0
    api_version: str = API_VERSION
    unsecure: bool = False
    default_headers: Mapping[str, str] | None = None

    def resolved_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "Accept": "application/json",
            "X-Api-Version": self.api_version,
        }
        if self.default_headers:
            headers.update(self.default_headers)
        return headers


@dataclass(frozen=True, slots=True)
class ProxySecret:
    """Port and shared secret of the local RightLink agent."""

    port: int
    secret: str

    @property
    def host(self) -> str:
        return f"localhost:{self.port}"


def load_proxy_secret(path: str | Path = RLL_SECRET_PATH) -> ProxySecret:
    """Parse the RightLink agent `key=value` secret file."""

    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to load RLL config: {exc}") from exc
    return parse_proxy_secret(content)


def parse_proxy_secret(content: str) -> ProxySecret:
    port: int | None = None
    secret: str | None = None
    for line in content.splitlines():
        if not line.strip():
            continue
        elems = line.split("=")
        if len(elems) != 2:
            raise ConfigError(f"Invalid RLL configuration line '{line}'")
        key, value = elems
        if key == RLL_PORT_KEY:
            if not (value.isascii() and value.isdigit()):
                raise ConfigError(f"Invalid port value '{value}'")
            port = int(value)
        elif key == RLL_SECRET_KEY:
            secret = value
    if port is None:
        raise ConfigError(f"RLL configuration is missing {RLL_PORT_KEY}")
    if secret is None:
        raise ConfigError(f"RLL configuration is missing {RLL_SECRET_KEY}")
    return ProxySecret(port=port, secret=secret)
