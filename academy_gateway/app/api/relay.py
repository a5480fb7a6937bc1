"""Turning backend answers and local failures into Flask responses."""
from __future__ import annotations

from http import HTTPStatus

from flask import Response, current_app, jsonify

from academy_gateway.app.services.upstream import (
    UpstreamResponse,
    UpstreamTransportError,
    is_json_content,
    parse_body,
)


def no_store(response: Response) -> Response:
    response.headers["Cache-Control"] = "no-store"
    return response


def error_response(error: str, status: int, *, detail: str | None = None) -> Response:
    """Build the ``{"ok": false, "error": ...}`` body used for local failures."""

    payload: dict[str, object] = {"ok": False, "error": error}
    if detail:
        payload["detail"] = detail
    response = jsonify(payload)
    response.status_code = int(status)
    return no_store(response)


def json_response(payload: object, status: int = HTTPStatus.OK) -> Response:
    response = jsonify(payload)
    response.status_code = int(status)
    return no_store(response)


def transport_failure(exc: UpstreamTransportError) -> Response:
    """Map a failed backend call onto a 502 answer."""

    current_app.logger.error("Backend request failed: %s", exc)
    return error_response(
        "Upstream request failed",
        HTTPStatus.BAD_GATEWAY,
        detail=str(exc) or exc.__class__.__name__,
    )


def relay(upstream: UpstreamResponse, *, default_content_type: str = "application/json") -> Response:
    """Pass the backend answer through unchanged.

    The status code is always preserved. A body that claims to be JSON but
    does not parse is replaced by a fallback payload carrying the raw text.
    """

    if upstream.body and is_json_content(upstream.content_type):
        parsed = parse_body(upstream)
        if not parsed.parsed:
            current_app.logger.warning(
                "Backend sent malformed JSON with status %s", upstream.status
            )
            return json_response(parsed.value, upstream.status)

    response = Response(
        upstream.body,
        status=upstream.status,
        content_type=upstream.content_type or default_content_type,
    )
    for name, value in upstream.headers.items():
        response.headers[name] = value
    return no_store(response)
