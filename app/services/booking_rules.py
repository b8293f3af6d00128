"""Booking admissibility rules.

Stays are half-open ranges ``[checkin, checkout)``: the checkout day is free
for the next guest, so back-to-back bookings on a turnover day are allowed.
Every caller (form affordances, availability checks and the pre-write guard)
goes through ``ranges_overlap`` so they cannot disagree.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "checkin_date",
    "checkout_date",
    "customer_name",
    "customer_phone",
    "booking_amount",
    "advance_amount",
    "number_of_guests",
)
MIN_NAME_LENGTH = 2
MIN_PHONE_LENGTH = 10


class BookingValidationError(Exception):
    """A candidate booking was rejected. ``reason`` is safe to show to users."""

    code = "invalid_booking"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class MissingField(BookingValidationError):
    code = "missing_field"

    def __init__(self, fields: list[str]):
        super().__init__(f"Missing required fields: {', '.join(fields)}")
        self.fields = fields


class InvalidFieldValue(BookingValidationError):
    code = "invalid_field_value"

    def __init__(self, field: str, reason: str):
        super().__init__(reason)
        self.field = field


class InvalidDate(BookingValidationError):
    code = "invalid_date"


class DateOrderViolation(BookingValidationError):
    code = "date_order_violation"


class PastCheckin(BookingValidationError):
    code = "past_checkin"


class OverlapConflict(BookingValidationError):
    code = "overlap_conflict"

    def __init__(self, conflicting_id: str | None = None):
        super().__init__("The selected dates overlap with an existing booking")
        self.conflicting_id = conflicting_id


@dataclass(frozen=True)
class BookingFields:
    checkin_date: date
    checkout_date: date
    customer_name: str
    customer_phone: str
    booking_amount: float
    advance_amount: float
    number_of_guests: int

    def to_record(self) -> dict[str, Any]:
        """Column values as stored, dates in ``YYYY-MM-DD`` form."""
        return {
            "checkin_date": self.checkin_date.isoformat(),
            "checkout_date": self.checkout_date.isoformat(),
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "booking_amount": self.booking_amount,
            "advance_amount": self.advance_amount,
            "number_of_guests": self.number_of_guests,
        }


def parse_date(value: Any) -> date | None:
    """Accept ``date``/``datetime`` objects and ISO 8601 strings; ``None`` otherwise."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.strip()).date()
    except ValueError:
        return None


def ranges_overlap(
    new_start: date, new_end: date, existing_start: date, existing_end: date
) -> bool:
    """Half-open overlap test.

    Equivalent to ``new_start < existing_end and existing_start < new_end``.
    """
    return (
        (existing_start <= new_start < existing_end)
        or (existing_start < new_end <= existing_end)
        or (new_start <= existing_start and new_end >= existing_end)
    )


def _stay_range(booking: Mapping[str, Any]) -> tuple[date, date] | None:
    checkin = parse_date(booking.get("checkin_date"))
    checkout = parse_date(booking.get("checkout_date"))
    if checkin is None or checkout is None:
        logger.warning("Skipping booking %s with unreadable dates", booking.get("id"))
        return None
    return checkin, checkout


def _others(
    existing: Iterable[Mapping[str, Any]], exclude_id: str | None
) -> Iterable[tuple[Mapping[str, Any], date, date]]:
    for booking in existing:
        if exclude_id is not None and booking.get("id") == exclude_id:
            continue
        stay = _stay_range(booking)
        if stay is None:
            continue
        yield booking, stay[0], stay[1]


def find_conflict(
    checkin: date,
    checkout: date,
    existing: Iterable[Mapping[str, Any]],
    exclude_id: str | None = None,
) -> Mapping[str, Any] | None:
    """First booking whose stay overlaps ``[checkin, checkout)``, if any."""
    for booking, start, end in _others(existing, exclude_id):
        if ranges_overlap(checkin, checkout, start, end):
            return booking
    return None


def is_night_booked(
    day: date,
    existing: Iterable[Mapping[str, Any]],
    exclude_id: str | None = None,
) -> bool:
    """True when someone sleeps at the property on the night starting ``day``."""
    return find_conflict(day, day + timedelta(days=1), existing, exclude_id) is not None


def booked_nights(
    existing: Iterable[Mapping[str, Any]],
    start: date,
    end: date,
    exclude_id: str | None = None,
) -> list[date]:
    """Booked nights in ``[start, end)``, in calendar order."""
    bookings = list(existing)
    nights = []
    day = start
    while day < end:
        if is_night_booked(day, bookings, exclude_id):
            nights.append(day)
        day += timedelta(days=1)
    return nights


def find_overlapping_pairs(
    bookings: Iterable[Mapping[str, Any]],
) -> list[tuple[Mapping[str, Any], Mapping[str, Any]]]:
    """Pairs of stored bookings that overlap each other."""
    stays = list(_others(bookings, None))
    pairs = []
    for index, (first, first_start, first_end) in enumerate(stays):
        for second, second_start, second_end in stays[index + 1:]:
            if first.get("id") == second.get("id"):
                continue
            if ranges_overlap(first_start, first_end, second_start, second_end):
                pairs.append((first, second))
    return pairs


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _validate_fields(candidate: Mapping[str, Any]) -> dict[str, Any]:
    name = candidate["customer_name"]
    if not isinstance(name, str) or len(name.strip()) < MIN_NAME_LENGTH:
        raise InvalidFieldValue(
            "customer_name", "Customer name must be at least 2 characters long"
        )

    phone = candidate["customer_phone"]
    if not isinstance(phone, str) or len(phone.strip()) < MIN_PHONE_LENGTH:
        raise InvalidFieldValue(
            "customer_phone", "Customer phone must be at least 10 characters long"
        )

    booking_amount = _to_number(candidate["booking_amount"])
    if booking_amount is None or booking_amount < 0:
        raise InvalidFieldValue(
            "booking_amount", "Booking amount must be a positive number"
        )

    advance_amount = _to_number(candidate["advance_amount"])
    if advance_amount is None or advance_amount < 0:
        raise InvalidFieldValue(
            "advance_amount", "Advance amount must be a positive number"
        )

    if advance_amount > booking_amount:
        raise InvalidFieldValue(
            "advance_amount", "Advance amount cannot be greater than booking amount"
        )

    guests = _to_number(candidate["number_of_guests"])
    if guests is None or guests < 1 or not guests.is_integer():
        raise InvalidFieldValue(
            "number_of_guests", "Number of guests must be at least 1"
        )

    return {
        "customer_name": name.strip(),
        "customer_phone": phone.strip(),
        "booking_amount": booking_amount,
        "advance_amount": advance_amount,
        "number_of_guests": int(guests),
    }


def validate_booking(
    candidate: Mapping[str, Any],
    existing: Iterable[Mapping[str, Any]],
    exclude_id: str | None = None,
    *,
    check_past: bool = True,
    today: date | None = None,
) -> BookingFields:
    """Decide whether ``candidate`` may be written next to ``existing``.

    Checks run in a fixed order and the first failure is raised as a
    ``BookingValidationError`` subclass. ``check_past`` is on for new
    bookings only; edits may correct historical records. ``existing``
    must be a fresh read of the store taken just before the write.
    """
    missing = [field for field in REQUIRED_FIELDS if _is_missing(candidate.get(field))]
    if missing:
        raise MissingField(missing)

    values = _validate_fields(candidate)

    checkin = parse_date(candidate["checkin_date"])
    if checkin is None:
        raise InvalidDate("Invalid check-in date format")
    checkout = parse_date(candidate["checkout_date"])
    if checkout is None:
        raise InvalidDate("Invalid check-out date format")

    if checkout <= checkin:
        raise DateOrderViolation("Check-out date must be after check-in date")

    if check_past:
        if today is None:
            today = date.today()
        if checkin < today:
            raise PastCheckin("Check-in date cannot be in the past")

    conflict = find_conflict(checkin, checkout, existing, exclude_id)
    if conflict is not None:
        raise OverlapConflict(conflict.get("id"))

    return BookingFields(checkin_date=checkin, checkout_date=checkout, **values)
