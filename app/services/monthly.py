from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import MAXYEAR, MINYEAR, date
from typing import Any

from app.services.booking_rules import parse_date, ranges_overlap


def parse_month(value: str) -> date:
    """``YYYY-MM`` to the first day of that month."""
    try:
        year, month = (int(part) for part in value.split("-"))
        return date(year, month, 1)
    except (ValueError, TypeError):
        raise ValueError("Month must use the YYYY-MM format.")


def add_months(month_start: date, months: int) -> date:
    index = month_start.year * 12 + (month_start.month - 1) + months
    if not MINYEAR <= index // 12 <= MAXYEAR:
        raise ValueError("Month is outside the supported range.")
    return date(index // 12, index % 12 + 1, 1)


def stay_nights(booking: Mapping[str, Any]) -> int:
    checkin = parse_date(booking.get("checkin_date"))
    checkout = parse_date(booking.get("checkout_date"))
    if checkin is None or checkout is None:
        return 0
    return max((checkout - checkin).days, 0)


def bookings_for_month(
    bookings: Iterable[Mapping[str, Any]], month_start: date
) -> list[Mapping[str, Any]]:
    """Bookings with at least one night inside the month."""
    month_end = add_months(month_start, 1)
    results = []
    for booking in bookings:
        checkin = parse_date(booking.get("checkin_date"))
        checkout = parse_date(booking.get("checkout_date"))
        if checkin is None or checkout is None:
            continue
        if ranges_overlap(checkin, checkout, month_start, month_end):
            results.append(booking)
    return results


def month_stats(bookings: list[Mapping[str, Any]]) -> dict[str, Any]:
    total_bookings = len(bookings)
    total_revenue = sum(float(b.get("booking_amount") or 0) for b in bookings)
    total_nights = sum(stay_nights(b) for b in bookings)
    # Half-up rounding, so 2.5 nights reads as 3.
    average_nights = int(total_nights / total_bookings + 0.5) if total_bookings else 0
    return {
        "total_bookings": total_bookings,
        "total_revenue": total_revenue,
        "total_nights": total_nights,
        "average_nights": average_nights,
    }


def monthly_overview(
    bookings: Iterable[Mapping[str, Any]], anchor: date
) -> list[dict[str, Any]]:
    """Previous, anchor and next month with their bookings and totals."""
    rows = list(bookings)
    current = date(anchor.year, anchor.month, 1)
    months = []
    for offset, variant in ((-1, "past"), (0, "current"), (1, "future")):
        month_start = add_months(current, offset)
        month_bookings = bookings_for_month(rows, month_start)
        months.append(
            {
                "month": month_start.strftime("%Y-%m"),
                "label": month_start.strftime("%B %Y"),
                "variant": variant,
                "bookings": month_bookings,
                "stats": month_stats(month_bookings),
            }
        )
    return months
