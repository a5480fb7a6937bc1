"""Generic forwarding of API routes to the backend."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Any, Callable, Iterable, Mapping
from urllib.parse import quote

from flask import Blueprint, Response, request

from academy_gateway.app.api.relay import error_response, no_store, relay, transport_failure
from academy_gateway.app.services.identity import PROVIDER_HEADER, extract_provider_id
from academy_gateway.app.services.upstream import UpstreamTransportError, send, upstream_url

API_PREFIX = "/api"
CORS_ALLOW_HEADERS = ["Content-Type"]


class BodyPolicy(str, Enum):
    """How the inbound request body is turned into the forwarded body."""

    NONE = "none"
    LENIENT_JSON = "lenient_json"
    STRICT_JSON = "strict_json"
    QUERY_AS_JSON = "query_as_json"


@dataclass(frozen=True, slots=True)
class Route:
    """One forwarding rule: a method and path mapped onto a backend path."""

    method: str
    rule: str
    upstream: str
    auth: bool = True
    body: BodyPolicy = BodyPolicy.NONE
    forward_query: bool = False
    upstream_method: str | None = None
    transform: Callable[[Any], Any] | None = None
    client_headers: tuple[str, ...] = ()
    header_defaults: tuple[tuple[str, str], ...] = ()
    cors: bool = False
    default_content_type: str = "application/json"

    @property
    def endpoint(self) -> str:
        slug = re.sub(r"[^a-z0-9]+", "_", self.rule.lower()).strip("_")
        return f"{self.method.lower()}_{slug}"

    def upstream_path(self, path_params: Mapping[str, Any]) -> str:
        quoted = {name: quote(str(value), safe="") for name, value in path_params.items()}
        return self.upstream.format(**quoted)


def forward(route: Route, path_params: Mapping[str, Any]) -> Response:
    """Authenticate, forward and relay a single inbound request."""

    headers = {"Accept": request.headers.get("Accept") or "application/json"}
    if route.auth:
        provider_id = extract_provider_id(request.cookies)
        if not provider_id:
            return error_response("Unauthorized", HTTPStatus.UNAUTHORIZED)
        headers[PROVIDER_HEADER] = provider_id

    body: bytes | None = None
    if route.body is not BodyPolicy.NONE:
        payload = _inbound_payload(route.body)
        if payload is None:
            return error_response("Invalid JSON body", HTTPStatus.BAD_REQUEST)
        if route.transform is not None:
            payload = route.transform(payload)
        body = json.dumps(payload).encode("utf-8")
        headers["Content-Type"] = "application/json"

    defaults = dict(route.header_defaults)
    for name in route.client_headers:
        value = request.headers.get(name) or defaults.get(name)
        if value:
            headers[name] = value

    query = request.query_string.decode("utf-8", errors="replace") if route.forward_query else ""
    url = upstream_url(route.upstream_path(path_params), query)

    try:
        upstream = send(route.upstream_method or request.method, url, headers=headers, body=body)
    except UpstreamTransportError as exc:
        return transport_failure(exc)

    response = relay(upstream, default_content_type=route.default_content_type)
    if route.cors:
        _add_cors_headers(response, [route.method])
    return response


def _add_cors_headers(response: Response, methods: list[str]) -> None:
    # flask-cors owns Allow-Origin and answers real preflights itself.
    response.vary.add("Origin")
    if "Access-Control-Request-Method" not in request.headers:
        response.headers["Access-Control-Allow-Methods"] = ", ".join(methods + ["OPTIONS"])
        response.headers["Access-Control-Allow-Headers"] = ", ".join(CORS_ALLOW_HEADERS)


def _inbound_payload(policy: BodyPolicy) -> Any:
    if policy is BodyPolicy.QUERY_AS_JSON:
        return request.args.to_dict()

    payload = request.get_json(force=True, silent=True)
    if policy is BodyPolicy.STRICT_JSON:
        return payload if isinstance(payload, dict) else None
    return {} if payload is None else payload


def _preflight_view(endpoint: str, methods: list[str]) -> Callable[..., Response]:
    def preflight(**_path_params: Any) -> Response:
        """Answer a CORS preflight for one of the public routes."""

        response = no_store(Response(status=HTTPStatus.NO_CONTENT))
        _add_cors_headers(response, methods)
        return response

    preflight.__name__ = endpoint
    return preflight


def _view(route: Route) -> Callable[..., Response]:
    def view(**path_params: Any) -> Response:
        return forward(route, path_params)

    view.__name__ = route.endpoint
    view.__doc__ = f"Forward {route.method} {route.rule} to {route.upstream}."
    return view


def register_routes(blueprint: Blueprint, routes: Iterable[Route]) -> None:
    """Bind every route descriptor onto ``blueprint``."""

    cors_methods: dict[str, list[str]] = {}
    for route in routes:
        blueprint.add_url_rule(
            route.rule,
            endpoint=route.endpoint,
            view_func=_view(route),
            methods=[route.method],
            provide_automatic_options=not route.cors,
        )
        if route.cors:
            cors_methods.setdefault(route.rule, []).append(route.method)

    for rule, methods in cors_methods.items():
        endpoint = Route("OPTIONS", rule, "").endpoint
        blueprint.add_url_rule(
            rule,
            endpoint=endpoint,
            view_func=_preflight_view(endpoint, sorted(methods)),
            methods=["OPTIONS"],
            provide_automatic_options=False,
        )


def _rule_pattern(rule: str) -> str:
    parts = re.split(r"(<[^>]+>)", API_PREFIX + rule)
    pattern = "".join(
        "[^/]+" if part.startswith("<") else re.escape(part) for part in parts
    )
    return f"^{pattern}$"


def cors_resources(routes: Iterable[Route], origin: str) -> dict[str, dict[str, Any]]:
    """flask-cors resource options for the routes consumed cross-origin."""

    methods: dict[str, list[str]] = {}
    for route in routes:
        if route.cors:
            methods.setdefault(_rule_pattern(route.rule), []).append(route.method)

    return {
        pattern: {
            "origins": [origin],
            "methods": sorted(set(route_methods)) + ["OPTIONS"],
            "allow_headers": CORS_ALLOW_HEADERS,
        }
        for pattern, route_methods in methods.items()
    }
