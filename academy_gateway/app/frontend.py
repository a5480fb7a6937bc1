"""Routes for the marketing site and the admin shell pages."""
from __future__ import annotations

from flask import Blueprint, abort, jsonify, render_template, request

frontend_bp = Blueprint("frontend", __name__)

ADMIN_SECTIONS: dict[str, str] = {
    "bookings": "Bookings",
    "online-bookings": "Online bookings",
    "customers": "Customers",
    "coaches": "Coaches",
    "places": "Places",
    "invoices": "Invoices",
    "revenue": "Revenue",
    "datev": "DATEV export",
    "news": "News",
}

ACCOUNT_PAGES: dict[str, str] = {
    "login": "Sign in",
    "signup": "Create account",
    "password-reset": "Reset password",
    "new-password": "Choose a new password",
}


@frontend_bp.get("/")
def home() -> str:
    """Render the landing page."""

    return render_template("home.html")


@frontend_bp.get("/trainings")
def trainings() -> str:
    return render_template("trainings.html")


@frontend_bp.get("/orte")
def places() -> str:
    return render_template("places.html")


@frontend_bp.get("/book")
def book() -> str:
    """Render the embeddable booking form."""

    return render_template("book.html", offer_id=request.args.get("offerId", ""))


@frontend_bp.get("/admin/login")
@frontend_bp.get("/admin/signup")
@frontend_bp.get("/admin/password-reset")
@frontend_bp.get("/admin/new-password")
def account_page() -> str:
    """Render the admin account forms."""

    page = request.path.rstrip("/").rsplit("/", 1)[-1]
    return render_template(
        "admin/account.html",
        page=page,
        title=ACCOUNT_PAGES[page],
        next_url=request.args.get("next", "/admin"),
    )


@frontend_bp.get("/admin")
@frontend_bp.get("/admin/<section>")
def admin_section(section: str | None = None) -> str:
    """Render the admin shell for one section."""

    if section is not None and section not in ADMIN_SECTIONS:
        abort(404)
    return render_template(
        "admin/section.html",
        section=section,
        title=ADMIN_SECTIONS.get(section or "", "Dashboard"),
        sections=ADMIN_SECTIONS,
    )


def debug_cookies():
    """Echo the session cookie while debugging."""

    return jsonify(admin_token=request.cookies.get("admin_token"))
