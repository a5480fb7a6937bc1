"""Request middleware: page access guard and request logging."""
from __future__ import annotations

import time
from urllib.parse import urlencode

from flask import Flask, current_app, g, redirect, request

from academy_gateway.app.services.identity import SESSION_COOKIE

LOGIN_PAGE = "/admin/login"

PUBLIC_ADMIN_PAGES = frozenset(
    {
        "/admin/login",
        "/admin/signup",
        "/admin/password-reset",
        "/admin/new-password",
    }
)

FIXED_REDIRECTS: dict[str, str] = {
    "/customers": "/admin/customers",
}

SESSION_PAGES = frozenset({"/trainings"})


def register_access_guard(app: Flask) -> None:
    """Redirect page requests that need an admin session or a different URL."""

    @app.before_request
    def _guard_pages():
        path = _normalize_path(request.path)
        if path.startswith("/api/") or path.startswith("/static/"):
            return None

        if path == "/book" and request.args.get("embed") != "1":
            return redirect("/")

        target = FIXED_REDIRECTS.get(path)
        if target is not None:
            return redirect(target)

        needs_session = path in SESSION_PAGES or (
            (path == "/admin" or path.startswith("/admin/")) and path not in PUBLIC_ADMIN_PAGES
        )
        if needs_session and not request.cookies.get(SESSION_COOKIE):
            return redirect(_login_url())
        return None


def register_request_logging(app: Flask) -> None:
    """Log one line per request with status and duration."""

    @app.before_request
    def _start_timer() -> None:
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = getattr(g, "request_started", None)
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        current_app.logger.debug(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def _login_url() -> str:
    next_target = request.path
    query = request.query_string.decode("utf-8", errors="replace")
    if query:
        next_target += "?" + query
    return f"{LOGIN_PAGE}?{urlencode({'next': next_target})}"


def _normalize_path(path: str) -> str:
    if path != "/" and path.endswith("/"):
        return path[:-1]
    return path
