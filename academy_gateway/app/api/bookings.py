"""Aggregated view over online holiday bookings."""
from __future__ import annotations

from http import HTTPStatus
from urllib.parse import urlencode

from flask import request
from flask.typing import ResponseReturnValue

from academy_gateway.app.api.relay import error_response, json_response, transport_failure
from academy_gateway.app.services.bookings import (
    VIEW_QUERY_KEYS,
    extract_bookings,
    online_bookings_page,
)
from academy_gateway.app.services.identity import PROVIDER_HEADER, extract_provider_id
from academy_gateway.app.services.upstream import (
    UpstreamTransportError,
    parse_body,
    send,
    upstream_url,
)

from . import api_bp

# Large enough to pull every booking in a single backend round trip.
FETCH_ALL_LIMIT = "10000"
ONLINE_BOOKINGS_RULE = "/admin/online-bookings"


@api_bp.get(ONLINE_BOOKINGS_RULE)
def online_bookings() -> ResponseReturnValue:
    """List camp and power-training requests with per-status counts."""

    provider_id = extract_provider_id(request.cookies)
    if not provider_id:
        return error_response("Unauthorized", HTTPStatus.UNAUTHORIZED)

    query = [
        (key, value)
        for key, value in request.args.items(multi=True)
        if key not in VIEW_QUERY_KEYS
    ]
    query += [("includeHoliday", "1"), ("page", "1"), ("limit", FETCH_ALL_LIMIT)]

    try:
        upstream = send(
            "GET",
            upstream_url("/bookings", urlencode(query)),
            headers={"Accept": "application/json", PROVIDER_HEADER: provider_id},
        )
    except UpstreamTransportError as exc:
        return transport_failure(exc)

    data = parse_body(upstream).value
    if not upstream.ok:
        error = data.get("error") if isinstance(data, dict) else None
        return error_response(
            error or f"Upstream /bookings failed ({upstream.status})", upstream.status
        )

    page = online_bookings_page(
        extract_bookings(data),
        program=request.args.get("program"),
        status=request.args.get("status"),
        page=request.args.get("page"),
        limit=request.args.get("limit"),
    )
    return json_response(page.as_dict())
