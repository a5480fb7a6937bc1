"""Forwarding rules for every plain proxy route under ``/api``."""
from __future__ import annotations

from academy_gateway.app.api.proxy import BodyPolicy, Route
from academy_gateway.app.services.bookings import sanitize_public_booking

JSON = BodyPolicy.LENIENT_JSON
CLIENT_HEADERS = ("X-Forwarded-For", "X-Real-IP", "User-Agent")
PROXY_USER_AGENT = "kickstart-academy/next-proxy"

PUBLIC_ROUTES: tuple[Route, ...] = (
    Route("GET", "/offers", "/offers", auth=False, forward_query=True),
    Route("GET", "/offers/<id>", "/offers/{id}", auth=False),
    Route("GET", "/coaches", "/coaches", auth=False, forward_query=True, cors=True),
    Route("GET", "/coaches/<slug>", "/coaches/{slug}", auth=False, cors=True),
    Route(
        "POST",
        "/public/bookings",
        "/bookings",
        auth=False,
        body=BodyPolicy.STRICT_JSON,
        transform=sanitize_public_booking,
        client_headers=CLIENT_HEADERS,
        header_defaults=(("User-Agent", PROXY_USER_AGENT),),
    ),
    Route("POST", "/admin/auth/signup", "/admin/auth/signup", auth=False, body=JSON),
    Route("POST", "/admin/auth/reset", "/admin/auth/reset", auth=False, body=JSON),
)

BOOKING_ROUTES: tuple[Route, ...] = (
    Route("GET", "/admin/bookings", "/bookings", forward_query=True),
    Route("GET", "/admin/bookings/<id>", "/bookings/{id}"),
    Route("DELETE", "/admin/bookings/<id>", "/bookings/{id}"),
    Route("DELETE", "/admin/bookings/<id>/hard", "/bookings/{id}/hard", forward_query=True),
    Route(
        "PATCH",
        "/admin/bookings/<id>/status",
        "/bookings/{id}/status",
        body=JSON,
        forward_query=True,
    ),
    Route("POST", "/admin/bookings/<id>/confirm", "/bookings/{id}/confirm", body=JSON),
    Route(
        "POST",
        "/admin/bookings/<id>/cancel-confirmed",
        "/bookings/{id}/cancel-confirmed",
        body=JSON,
    ),
    Route("POST", "/admin/bookings/<id>/restore", "/bookings/{id}/restore", body=JSON),
    Route(
        "POST",
        "/admin/bookings/<id>/resend-confirmation",
        "/bookings/{id}/resend-confirmation",
        body=JSON,
    ),
    Route(
        "GET",
        "/admin/bookings/<id>/documents/<type>",
        "/bookings/{id}/documents/{type}",
        forward_query=True,
        default_content_type="application/pdf",
    ),
)

CUSTOMER_ROUTES: tuple[Route, ...] = (
    Route("GET", "/admin/customers", "/customers", forward_query=True),
    Route("POST", "/admin/customers", "/customers", body=JSON),
    Route("GET", "/admin/customers/<id>", "/customers/{id}"),
    Route("PUT", "/admin/customers/<id>", "/customers/{id}", body=JSON),
    Route("DELETE", "/admin/customers/<id>", "/customers/{id}"),
    Route("POST", "/admin/customers/<id>/bookings", "/customers/{id}/bookings", body=JSON),
    Route("POST", "/admin/customers/<id>/cancel", "/customers/{id}/cancel", body=JSON),
    Route("GET", "/admin/customers/<id>/family", "/customers/{id}/family"),
    Route(
        "POST",
        "/admin/customers/<id>/family-members",
        "/customers/{id}/family-members",
        body=JSON,
    ),
    Route(
        "GET",
        "/admin/customers/<id>/documents",
        "/customers/{id}/documents",
        forward_query=True,
    ),
    Route(
        "GET",
        "/admin/customers/<id>/documents.csv",
        "/customers/{id}/documents.csv",
        forward_query=True,
        default_content_type="text/csv; charset=utf-8",
    ),
    Route(
        "GET",
        "/admin/customers/<id>/documents.zip",
        "/customers/{id}/documents.zip",
        forward_query=True,
        default_content_type="application/zip",
    ),
    Route(
        "GET",
        "/admin/customers/<id>/documents/storno",
        "/customers/{id}/documents/storno",
        forward_query=True,
        default_content_type="application/pdf",
    ),
    Route(
        "POST",
        "/admin/customers/<id>/documents/storno",
        "/customers/{id}/documents/storno",
        body=JSON,
        default_content_type="application/pdf",
    ),
    Route(
        "GET",
        "/admin/customers/<id>/documents/<kind>",
        "/customers/{id}/documents/{kind}",
        forward_query=True,
        default_content_type="application/pdf",
    ),
    Route(
        "POST",
        "/admin/customers/<id>/documents/<kind>",
        "/customers/{id}/documents/{kind}",
        body=JSON,
        default_content_type="application/pdf",
    ),
    Route(
        "POST",
        "/admin/customers/<id>/bookings/<bid>/cancel",
        "/customers/{id}/bookings/{bid}/cancel",
        body=JSON,
    ),
    # Documents are opened in a new tab via GET but rendered by a backend POST.
    Route(
        "GET",
        "/admin/customers/<id>/bookings/<bid>/documents/<type>",
        "/customers/{id}/bookings/{bid}/documents/{type}",
        body=BodyPolicy.QUERY_AS_JSON,
        upstream_method="POST",
        default_content_type="application/pdf",
    ),
    Route(
        "POST",
        "/admin/customers/<id>/bookings/<bid>/documents/<type>",
        "/customers/{id}/bookings/{bid}/documents/{type}",
        body=JSON,
        default_content_type="application/pdf",
    ),
)

CATALOG_ROUTES: tuple[Route, ...] = (
    Route("GET", "/admin/offers", "/offers", forward_query=True),
    Route("POST", "/admin/offers", "/offers", body=JSON),
    Route("GET", "/admin/offers/<id>", "/offers/{id}"),
    Route("PATCH", "/admin/offers/<id>", "/offers/{id}", body=JSON),
    Route("DELETE", "/admin/offers/<id>", "/offers/{id}"),
    Route("GET", "/admin/places", "/places", forward_query=True),
    Route("POST", "/admin/places", "/places", body=JSON),
    Route("GET", "/admin/places/<id>", "/places/{id}"),
    Route("PUT", "/admin/places/<id>", "/places/{id}", body=JSON),
    Route("DELETE", "/admin/places/<id>", "/places/{id}"),
    Route("GET", "/admin/coaches", "/coaches", forward_query=True),
    Route("POST", "/admin/coaches", "/coaches", body=JSON),
    Route("GET", "/admin/coaches/<slug>", "/coaches/{slug}"),
    Route("PATCH", "/admin/coaches/<slug>", "/coaches/{slug}", body=JSON),
    Route("DELETE", "/admin/coaches/<slug>", "/coaches/{slug}"),
)

ACCOUNTING_ROUTES: tuple[Route, ...] = (
    Route("GET", "/admin/invoices", "/admin/invoices", forward_query=True),
    Route(
        "GET",
        "/admin/invoices/csv",
        "/admin/invoices/csv",
        forward_query=True,
        default_content_type="text/csv; charset=utf-8",
    ),
    Route(
        "GET",
        "/admin/invoices/zip",
        "/admin/invoices/zip",
        forward_query=True,
        default_content_type="application/zip",
    ),
    Route("GET", "/admin/revenue-derived", "/admin/revenue-derived", forward_query=True),
)

ACCOUNT_ROUTES: tuple[Route, ...] = (
    Route("GET", "/admin/auth/profile", "/admin/auth/profile", forward_query=True),
    Route("POST", "/admin/auth/profile", "/admin/auth/profile", body=JSON),
    Route("POST", "/admin/users/signup", "/admin/users/signup", body=JSON),
)

ROUTES: tuple[Route, ...] = (
    PUBLIC_ROUTES
    + BOOKING_ROUTES
    + CUSTOMER_ROUTES
    + CATALOG_ROUTES
    + ACCOUNTING_ROUTES
    + ACCOUNT_ROUTES
)
