"""Admin session endpoints."""
from __future__ import annotations

import re
from http import HTTPStatus
from urllib.parse import urlencode

from flask import Response, current_app, redirect, request
from flask.typing import ResponseReturnValue

from academy_gateway.app.api.relay import (
    error_response,
    json_response,
    no_store,
    transport_failure,
)
from academy_gateway.app.services.identity import (
    PROVIDER_HEADER,
    clear_admin_session,
    extract_email,
    extract_provider_id,
    issue_admin_session,
)
from academy_gateway.app.services.upstream import (
    UpstreamTransportError,
    parse_body,
    send,
    send_json,
    upstream_url,
)

from . import api_bp

ENV_ADMIN_ID = "env-admin"
LOGIN_REDIRECT = "/admin/login?next=/admin/bookings"
EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
FORGOT_ALLOW = "POST, OPTIONS"


def _clean(value: object) -> str:
    return str(value if value is not None else "").strip().strip("'\"")


@api_bp.post("/admin/auth/login")
def login() -> ResponseReturnValue:
    """Authenticate an admin and start a cookie session."""

    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        payload = {}
    email = _clean(payload.get("email")).lower()
    password = _clean(payload.get("password"))

    env_email = current_app.config.get("ADMIN_EMAIL") or ""
    env_password = current_app.config.get("ADMIN_PASSWORD") or ""
    if env_email and env_password and email == env_email:
        if password != env_password:
            return error_response("Invalid credentials", HTTPStatus.UNAUTHORIZED)
        response = json_response(
            {
                "ok": True,
                "user": {"id": ENV_ADMIN_ID, "fullName": "System Admin", "email": env_email},
            }
        )
        issue_admin_session(response, provider_id=ENV_ADMIN_ID, email=env_email, role="super")
        current_app.logger.info("Configured admin signed in")
        return response

    try:
        upstream = send_json("POST", "/admin/auth/login", {"email": email, "password": password})
    except UpstreamTransportError as exc:
        return transport_failure(exc)

    data = parse_body(upstream).value
    if not (upstream.ok and isinstance(data, dict) and data.get("ok")):
        return json_response(data, upstream.status or HTTPStatus.INTERNAL_SERVER_ERROR)

    user = data.get("user") if isinstance(data.get("user"), dict) else {}
    provider_id = _clean(user.get("id") or user.get("_id") or data.get("providerId"))
    if not provider_id:
        return error_response("Login response did not include a user id", HTTPStatus.BAD_GATEWAY)

    response = json_response(data)
    issue_admin_session(
        response,
        provider_id=provider_id,
        email=_clean(user.get("email")) or email,
        role="provider",
    )
    return response


@api_bp.route("/admin/auth/logout", methods=["GET", "POST"])
def logout() -> ResponseReturnValue:
    """End the admin session, optionally sending the browser to the login page."""

    if request.args.get("redirect") == "1":
        response = redirect(LOGIN_REDIRECT)
    else:
        response = Response(status=HTTPStatus.NO_CONTENT)
    clear_admin_session(response)
    return no_store(response)


@api_bp.get("/admin/auth/me")
def current_admin() -> ResponseReturnValue:
    """Return the signed-in admin's profile."""

    email = extract_email(request.cookies)
    if not email:
        return error_response("Unauthorized", HTTPStatus.UNAUTHORIZED)

    headers = {"Accept": "application/json"}
    provider_id = extract_provider_id(request.cookies)
    if provider_id:
        headers[PROVIDER_HEADER] = provider_id

    try:
        upstream = send(
            "GET",
            upstream_url("/admin/auth/profile", urlencode({"email": email})),
            headers=headers,
        )
    except UpstreamTransportError as exc:
        return transport_failure(exc)

    data = parse_body(upstream).value
    user = data.get("user") if upstream.ok and isinstance(data, dict) else None
    if not isinstance(user, dict):
        user = {}
    return json_response(
        {
            "ok": True,
            "user": {
                "id": user.get("id") or user.get("_id"),
                "fullName": user.get("fullName"),
                "email": user.get("email") or email,
                "avatarUrl": user.get("avatarUrl"),
            },
        }
    )


@api_bp.route("/admin/auth/forgot", methods=["POST"], provide_automatic_options=False)
def forgot_password() -> ResponseReturnValue:
    """Ask the backend to send a password reset e-mail."""

    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        payload = {}
    email = _clean(payload.get("email")).lower()
    if not EMAIL_PATTERN.match(email):
        return error_response("Invalid email", HTTPStatus.BAD_REQUEST)

    try:
        upstream = send_json("POST", "/admin/auth/forgot", {"email": email})
    except UpstreamTransportError as exc:
        return transport_failure(exc)

    data = parse_body(upstream).value
    succeeded = data.get("ok", True) if isinstance(data, dict) else True
    if upstream.ok and succeeded:
        message = data.get("message") if isinstance(data, dict) else None
        return json_response({"ok": True, "message": message or "Reset email sent"})
    if not data:
        data = {"ok": False, "error": "Forgot request failed"}
    return json_response(data, upstream.status or HTTPStatus.INTERNAL_SERVER_ERROR)


@api_bp.route(
    "/admin/auth/forgot",
    methods=["GET", "HEAD", "OPTIONS"],
    endpoint="forgot_password_other_methods",
    provide_automatic_options=False,
)
def forgot_password_other_methods() -> ResponseReturnValue:
    if request.method == "OPTIONS":
        response = Response(status=HTTPStatus.NO_CONTENT)
    else:
        response = error_response("Use POST", HTTPStatus.METHOD_NOT_ALLOWED)
    response.headers["Allow"] = FORGOT_ALLOW
    return response

