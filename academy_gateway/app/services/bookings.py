"""Booking payload shaping and the online (holiday) bookings view."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable

LOGGER = logging.getLogger(__name__)

PUBLIC_BOOKING_FIELDS = (
    "offerId",
    "firstName",
    "lastName",
    "email",
    "age",
    "date",
    "level",
    "message",
)

HOLIDAY_KEYWORDS = ("camp", "feriencamp", "holiday", "powertraining", "power training")
CAMP_KEYWORDS = ("camp", "feriencamp", "holiday camp")
POWER_KEYWORDS = ("powertraining", "power training")
COUNTED_STATUSES = ("confirmed", "cancelled", "deleted")
ONLINE_SOURCE = "online_request"

# Query keys the online bookings view consumes itself.
VIEW_QUERY_KEYS = frozenset({"page", "limit", "includeHoliday", "status", "program"})


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _as_number(value: Any) -> int | float | None:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def sanitize_public_booking(raw: dict[str, Any]) -> dict[str, Any]:
    """Keep the known booking fields and tuck everything else under ``meta``.

    The aliases cover the older field names the backend still accepts.
    """

    out: dict[str, Any] = {}
    for key in PUBLIC_BOOKING_FIELDS:
        if _present(raw.get(key)):
            out[key] = _as_number(raw[key]) if key == "age" else raw[key]

    if out.get("date") and "bookingDate" not in out:
        out["bookingDate"] = out["date"]
    if out.get("age") is not None and "childAge" not in out:
        out["childAge"] = out["age"]
    if out.get("firstName") and "first" not in out:
        out["first"] = out["firstName"]
    if out.get("lastName") and "last" not in out:
        out["last"] = out["lastName"]
    if out.get("email") and "mail" not in out:
        out["mail"] = out["email"]

    meta = {
        key: value
        for key, value in raw.items()
        if key not in PUBLIC_BOOKING_FIELDS and _present(value)
    }
    if meta:
        out["meta"] = meta
    # Values are never logged.
    LOGGER.debug("Public booking fields: %s", ", ".join(sorted(out)))
    return out


def _program_text(booking: dict[str, Any]) -> str:
    parts = (
        booking.get("offerType"),
        booking.get("offerTitle"),
        booking.get("level"),
        booking.get("program"),
        booking.get("message"),
    )
    return " ".join(str(part) for part in parts if part).lower()


def is_holiday_booking(booking: Any) -> bool:
    if not isinstance(booking, dict) or booking.get("source") != ONLINE_SOURCE:
        return False
    text = _program_text(booking)
    return any(keyword in text for keyword in HOLIDAY_KEYWORDS)


def is_power_booking(booking: dict[str, Any]) -> bool:
    text = _program_text(booking)
    return any(keyword in text for keyword in POWER_KEYWORDS)


def is_camp_booking(booking: dict[str, Any]) -> bool:
    text = _program_text(booking)
    return any(keyword in text for keyword in CAMP_KEYWORDS) and not is_power_booking(booking)


def extract_bookings(data: Any) -> list[Any]:
    """Find the booking list in the shapes the backend answers with."""

    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("bookings", "items"):
            if isinstance(data.get(key), list):
                return data[key]
    return []


def _positive_int(value: str | None, default: int) -> int:
    try:
        number = int(value) if value is not None else default
    except ValueError:
        return default
    return number if number > 0 else default


@dataclass(slots=True)
class OnlineBookingsPage:
    """One page of holiday bookings plus the per-status counts."""

    bookings: list[dict[str, Any]]
    total: int
    page: int
    pages: int
    limit: int
    counts: dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "bookings": self.bookings,
            "total": self.total,
            "page": self.page,
            "pages": self.pages,
            "limit": self.limit,
            "counts": self.counts,
        }


def online_bookings_page(
    bookings: Iterable[Any],
    *,
    program: str | None = None,
    status: str | None = None,
    page: str | None = None,
    limit: str | None = None,
) -> OnlineBookingsPage:
    """Filter, count and paginate holiday bookings.

    Counts are taken after the program filter but before the status filter,
    so the status tabs always show the totals for the selected program.
    """

    program = (program or "all").lower()
    status = (status or "all").lower()
    page_number = _positive_int(page, 1)
    page_size = _positive_int(limit, 10)

    holiday = [booking for booking in bookings if is_holiday_booking(booking)]
    if program == "camp":
        holiday = [booking for booking in holiday if is_camp_booking(booking)]
    elif program == "power":
        holiday = [booking for booking in holiday if is_power_booking(booking)]

    counts = dict.fromkeys(COUNTED_STATUSES, 0)
    for booking in holiday:
        booking_status = str(booking.get("status") or "").lower()
        if booking_status in counts:
            counts[booking_status] += 1

    selected = holiday
    if status != "all":
        wanted = "cancelled" if status == "canceled" else status
        selected = [
            booking for booking in holiday if str(booking.get("status") or "").lower() == wanted
        ]

    total = len(selected)
    pages = max(1, math.ceil(total / page_size))
    current = min(page_number, pages)
    start = (current - 1) * page_size
    return OnlineBookingsPage(
        bookings=selected[start : start + page_size],
        total=total,
        page=current,
        pages=pages,
        limit=page_size,
        counts=counts,
    )
