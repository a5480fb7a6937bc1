"""Client helpers for talking to the upstream backend API."""
from __future__ import annotations

import http.client
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping
import urllib.error
import urllib.request

from flask import current_app

from academy_gateway.config import DEFAULT_BACKEND_API_BASE

LOGGER = logging.getLogger(__name__)

PASSTHROUGH_HEADERS = ("Content-Disposition",)


@dataclass(slots=True)
class UpstreamResponse:
    """Status, content type and raw body received from the backend."""

    status: int
    content_type: str | None
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(slots=True)
class ParsedBody:
    """Outcome of decoding an upstream JSON body.

    ``parsed`` is false when the body was not valid JSON, in which case
    ``value`` holds a fallback payload carrying the raw text.
    """

    value: Any
    parsed: bool


class UpstreamTransportError(RuntimeError):
    """Raised when no response could be obtained from the backend."""


def backend_base() -> str:
    return current_app.config.get("BACKEND_API_BASE") or DEFAULT_BACKEND_API_BASE


def upstream_url(path: str, query: str = "") -> str:
    """Join ``path`` onto the configured backend origin."""

    url = backend_base() + "/" + path.lstrip("/")
    if query:
        url += "?" + query.lstrip("?")
    return url


def is_json_content(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def send(
    method: str,
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    body: bytes | None = None,
) -> UpstreamResponse:
    """Perform exactly one request against the backend.

    Every status code the backend answers with is returned as a response;
    only failures to obtain an answer raise :class:`UpstreamTransportError`.
    """

    request_headers = {"Cache-Control": "no-cache", "Pragma": "no-cache"}
    request_headers.update(headers or {})
    request = urllib.request.Request(
        url,
        data=body,
        headers=request_headers,
        method=method.upper(),
    )

    timeout = current_app.config.get("UPSTREAM_TIMEOUT")
    kwargs: dict[str, Any] = {} if timeout is None else {"timeout": timeout}

    LOGGER.debug("Forwarding %s %s", method.upper(), url)
    try:
        with urllib.request.urlopen(request, **kwargs) as response:
            result = _to_response(response.status, response.headers, response.read())
    except urllib.error.HTTPError as exc:
        result = _to_response(exc.code, exc.headers, exc.read())
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as exc:
        reason = getattr(exc, "reason", None) or exc
        raise UpstreamTransportError(str(reason) or exc.__class__.__name__) from exc

    LOGGER.debug("Backend answered %s %s with %s", method.upper(), url, result.status)
    return result


def send_json(
    method: str,
    path: str,
    payload: Any,
    *,
    headers: Mapping[str, str] | None = None,
    query: str = "",
) -> UpstreamResponse:
    """Send ``payload`` as a JSON body to ``path`` on the backend."""

    request_headers = {"Content-Type": "application/json", "Accept": "application/json"}
    request_headers.update(headers or {})
    return send(
        method,
        upstream_url(path, query),
        headers=request_headers,
        body=json.dumps(payload).encode("utf-8"),
    )


def parse_body(response: UpstreamResponse) -> ParsedBody:
    """Decode the JSON body of ``response`` without ever raising."""

    text = response.text
    try:
        return ParsedBody(value=json.loads(text), parsed=True)
    except ValueError:
        LOGGER.debug("Backend body is not valid JSON (status %s)", response.status)
        return ParsedBody(value={"ok": response.ok, "raw": text}, parsed=False)


def _to_response(status: int, headers: Any, body: bytes) -> UpstreamResponse:
    headers = headers or {}
    passthrough = {
        name: headers.get(name) for name in PASSTHROUGH_HEADERS if headers.get(name)
    }
    return UpstreamResponse(
        status=status,
        content_type=headers.get("Content-Type"),
        body=body or b"",
        headers=passthrough,
    )
