"""Provider identity and admin session cookies."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Mapping

from flask import Response, current_app
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

LOGGER = logging.getLogger(__name__)

SESSION_COOKIE = "admin_token"
UI_COOKIE = "admin_ui"
LEGACY_PROVIDER_COOKIES = ("providerId", "adminProviderId", "aid")
EMAIL_COOKIES = ("admin_email", "email")
PROVIDER_HEADER = "X-Provider-Id"


def session_claims(cookies: Mapping[str, str]) -> dict[str, Any] | None:
    """Return the verified claims of the session cookie, if any."""

    token = (cookies.get(SESSION_COOKIE) or "").strip()
    if not token:
        return None
    try:
        return decode_token(token)
    except (PyJWTError, JWTExtendedException) as exc:
        LOGGER.debug("Ignoring unusable session token: %s", exc)
        return None


def extract_provider_id(cookies: Mapping[str, str]) -> str | None:
    """Resolve the caller's provider id from the request cookies.

    The signed session token is preferred; the plain cookies written by older
    admin logins are accepted as a fallback.
    """

    claims = session_claims(cookies)
    if claims:
        subject = str(claims.get("sub") or "").strip()
        if subject:
            return subject

    for name in LEGACY_PROVIDER_COOKIES:
        value = (cookies.get(name) or "").strip()
        if value:
            return value
    return None


def extract_email(cookies: Mapping[str, str]) -> str | None:
    """Return the admin e-mail from the session token or the e-mail cookies."""

    claims = session_claims(cookies) or {}
    email = str(claims.get("email") or "").strip()
    if email:
        return email
    for name in EMAIL_COOKIES:
        value = (cookies.get(name) or "").strip()
        if value:
            return value
    return None


def issue_admin_session(response: Response, *, provider_id: str, email: str, role: str) -> None:
    """Attach a signed session token and the UI marker cookie to ``response``."""

    lifetime = timedelta(days=current_app.config.get("JWT_ACCESS_TOKEN_EXPIRES_DAYS", 7))
    token = create_access_token(
        identity=provider_id,
        additional_claims={"email": email, "role": role},
        expires_delta=lifetime,
    )
    secure = bool(current_app.config.get("SECURE_COOKIES"))
    max_age = int(lifetime.total_seconds())

    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=max_age,
        path="/",
        secure=secure,
        httponly=True,
        samesite="Lax",
    )
    response.set_cookie(
        UI_COOKIE,
        "1",
        max_age=max_age,
        path="/",
        secure=secure,
        httponly=False,
        samesite="Lax",
    )


def clear_cookie(response: Response, name: str, *, httponly: bool) -> None:
    """Remove ``name`` in the browser regardless of how it was first set."""

    response.delete_cookie(name, path="/")
    response.set_cookie(
        name,
        "",
        max_age=0,
        expires=0,
        path="/",
        secure=bool(current_app.config.get("SECURE_COOKIES")),
        httponly=httponly,
        samesite="Lax",
    )


def clear_admin_session(response: Response) -> None:
    """Expire every cookie that can carry an admin identity."""

    clear_cookie(response, SESSION_COOKIE, httponly=True)
    clear_cookie(response, UI_COOKIE, httponly=False)
    for name in LEGACY_PROVIDER_COOKIES:
        clear_cookie(response, name, httponly=False)
