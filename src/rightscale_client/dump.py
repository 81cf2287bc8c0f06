"""Request/response dump formats used by the instrumented transport."""

from __future__ import annotations

import enum
import json
import logging
from collections.abc import Mapping
from typing import Any

from requests import PreparedRequest, Response

logger = logging.getLogger(__name__)


class DumpFormat(enum.Enum):
    """How (and whether) HTTP traffic is dumped."""

    NONE = "none"
    DEBUG = "debug"
    JSON = "json"

    @property
    def is_verbose(self) -> bool:
        return self is not DumpFormat.NONE

    @classmethod
    def parse(cls, value: str | None) -> DumpFormat:
        if not value:
            return cls.NONE
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown dump format '{value}' (expected one of: {choices})") from None


def _decode(body: Any) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return str(body)


def _header_dict(headers: Mapping[str, str]) -> dict[str, str]:
    return {name: value for name, value in headers.items()}


def _render_headers(headers: Mapping[str, str]) -> str:
    return "\n".join(f"{name}: {value}" for name, value in sorted(headers.items()))


def dump_request(dump_format: DumpFormat, request: PreparedRequest) -> None:
    """Log the outgoing request; only the debug format dumps before sending."""

    if dump_format is not DumpFormat.DEBUG:
        return
    body = _decode(request.body)
    text = f"--------\n{request.method} {request.url}\n{_render_headers(request.headers)}"
    if body:
        text += f"\n\n{body}"
    logger.info("%s", text)


def dump_response(dump_format: DumpFormat, response: Response, request: PreparedRequest) -> None:
    """Log the response, together with its request in the JSON format."""

    if dump_format is DumpFormat.DEBUG:
        text = f"==> {response.status_code} {response.reason or ''}".rstrip()
        headers = _render_headers(response.headers)
        if headers:
            text += f"\n{headers}"
        if response.text:
            text += f"\n\n{response.text}"
        logger.info("%s", text)
    elif dump_format is DumpFormat.JSON:
        record = {
            "Request": {
                "Method": request.method,
                "URL": request.url,
                "Header": _header_dict(request.headers),
                "Body": _decode(request.body),
            },
            "Response": {
                "StatusCode": response.status_code,
                "Header": _header_dict(response.headers),
                "Body": response.text,
            },
        }
        logger.info("%s", json.dumps(record, indent=2))
