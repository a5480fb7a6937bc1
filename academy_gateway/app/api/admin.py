"""Catch-all passthrough for admin resources without a dedicated route."""
from __future__ import annotations

from http import HTTPStatus
from urllib.parse import quote

from flask import request
from flask.typing import ResponseReturnValue
from werkzeug.exceptions import MethodNotAllowed, NotFound
from werkzeug.routing import Map, Rule

from academy_gateway.app.api.relay import error_response, relay, transport_failure
from academy_gateway.app.services.identity import PROVIDER_HEADER, extract_provider_id
from academy_gateway.app.services.upstream import UpstreamTransportError, send, upstream_url

from . import api_bp
from .bookings import ONLINE_BOOKINGS_RULE
from .routes import ROUTES

EXCLUDED_PREFIXES = frozenset({"auth"})
BODYLESS_METHODS = frozenset({"GET", "HEAD"})

# Admin paths owned by a dedicated route; the passthrough never forwards them.
DECLARED_ADMIN_RULES = Map(
    [
        Rule(route.rule, methods=[route.method], endpoint=route.endpoint)
        for route in ROUTES
        if route.rule.startswith("/admin/")
    ]
    + [Rule(ONLINE_BOOKINGS_RULE, methods=["GET"], endpoint="online_bookings")]
)


def declared_method_error(path: str, method: str) -> ResponseReturnValue | None:
    """Answer 405 when ``path`` belongs to a dedicated route without ``method``."""

    try:
        DECLARED_ADMIN_RULES.bind("localhost").match(path, method=method)
    except MethodNotAllowed as exc:
        response = error_response("Method not allowed", HTTPStatus.METHOD_NOT_ALLOWED)
        response.headers["Allow"] = ", ".join(sorted(exc.valid_methods or ()))
        return response
    except NotFound:
        pass
    return None


@api_bp.route(
    "/admin/<path:slug>",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    provide_automatic_options=False,
)
def admin_passthrough(slug: str) -> ResponseReturnValue:
    """Forward any other ``/api/admin/...`` call to ``/admin/...`` upstream."""

    segments = [segment for segment in slug.split("/") if segment]
    if segments and segments[0].lower() in EXCLUDED_PREFIXES:
        return error_response("Not found", HTTPStatus.NOT_FOUND)

    rejected = declared_method_error("/admin/" + "/".join(segments), request.method)
    if rejected is not None:
        return rejected

    provider_id = extract_provider_id(request.cookies)
    if not provider_id:
        return error_response("Unauthorized", HTTPStatus.UNAUTHORIZED)

    headers = {
        PROVIDER_HEADER: provider_id,
        "Accept": request.headers.get("Accept") or "*/*",
    }
    if request.content_type:
        headers["Content-Type"] = request.content_type

    body = None if request.method in BODYLESS_METHODS else request.get_data()
    path = "/admin/" + "/".join(quote(segment, safe="") for segment in segments)
    query = request.query_string.decode("utf-8", errors="replace")

    try:
        upstream = send(request.method, upstream_url(path, query), headers=headers, body=body)
    except UpstreamTransportError as exc:
        return transport_failure(exc)
    return relay(upstream, default_content_type="application/octet-stream")
