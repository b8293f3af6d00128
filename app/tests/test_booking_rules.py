from __future__ import annotations

from datetime import date, timedelta

import pytest

from app.services.booking_rules import (
    DateOrderViolation,
    InvalidDate,
    InvalidFieldValue,
    MissingField,
    OverlapConflict,
    PastCheckin,
    booked_nights,
    find_conflict,
    find_overlapping_pairs,
    is_night_booked,
    parse_date,
    ranges_overlap,
    validate_booking,
)
from app.tests.fakes import booking_payload, booking_row

TODAY = date(2025, 6, 1)


def _existing() -> list[dict]:
    return [booking_row("recA", "2025-06-10", "2025-06-12")]


def test_ranges_overlap_matches_half_open_intersection():
    base = date(2025, 6, 1)
    days = [base + timedelta(days=n) for n in range(6)]
    for a in days:
        for b in days:
            if b <= a:
                continue
            for c in days:
                for d in days:
                    if d <= c:
                        continue
                    assert ranges_overlap(a, b, c, d) == (a < d and c < b), (a, b, c, d)


def test_touching_ranges_do_not_overlap():
    assert not ranges_overlap(
        date(2025, 6, 12), date(2025, 6, 14), date(2025, 6, 10), date(2025, 6, 12)
    )
    assert not ranges_overlap(
        date(2025, 6, 8), date(2025, 6, 10), date(2025, 6, 10), date(2025, 6, 12)
    )


def test_adjacent_booking_is_accepted():
    fields = validate_booking(
        booking_payload("2025-06-12", "2025-06-14"), _existing(), today=TODAY
    )

    assert fields.checkin_date == date(2025, 6, 12)
    assert fields.checkout_date == date(2025, 6, 14)


def test_overlapping_booking_is_rejected():
    with pytest.raises(OverlapConflict) as excinfo:
        validate_booking(booking_payload("2025-06-11", "2025-06-13"), _existing(), today=TODAY)

    assert excinfo.value.conflicting_id == "recA"
    assert excinfo.value.reason == "The selected dates overlap with an existing booking"


def test_range_containing_existing_booking_is_rejected():
    with pytest.raises(OverlapConflict):
        validate_booking(booking_payload("2025-06-09", "2025-06-15"), _existing(), today=TODAY)


def test_advance_above_booking_amount_is_rejected_before_overlap():
    payload = booking_payload(
        "2025-06-11", "2025-06-13", booking_amount=100, advance_amount=150
    )

    with pytest.raises(InvalidFieldValue) as excinfo:
        validate_booking(payload, _existing(), today=TODAY)

    assert excinfo.value.field == "advance_amount"
    assert excinfo.value.reason == "Advance amount cannot be greater than booking amount"


def test_same_day_checkout_is_a_date_order_violation():
    with pytest.raises(DateOrderViolation):
        validate_booking(booking_payload("2025-06-20", "2025-06-20"), [], today=TODAY)

    with pytest.raises(DateOrderViolation):
        validate_booking(booking_payload("2025-06-11", "2025-06-11"), _existing(), today=TODAY)


def test_editing_a_booking_never_conflicts_with_itself():
    existing = _existing()

    fields = validate_booking(
        booking_payload("2025-06-10", "2025-06-13"),
        existing,
        exclude_id="recA",
        check_past=False,
    )

    assert fields.checkout_date == date(2025, 6, 13)


def test_past_checkin_is_rejected_on_create_only():
    yesterday = (TODAY - timedelta(days=1)).isoformat()
    payload = booking_payload(yesterday, TODAY.isoformat())
    existing = [booking_row("recOld", yesterday, TODAY.isoformat())]

    with pytest.raises(PastCheckin):
        validate_booking(payload, [], today=TODAY)

    fields = validate_booking(payload, existing, exclude_id="recOld", check_past=False)
    assert fields.checkin_date == TODAY - timedelta(days=1)


def test_checkin_today_is_allowed():
    fields = validate_booking(
        booking_payload(TODAY.isoformat(), "2025-06-02"), [], today=TODAY
    )

    assert fields.checkin_date == TODAY


def test_missing_fields_are_listed_together():
    payload = booking_payload("2025-06-20", "2025-06-22", customer_name="  ")
    del payload["number_of_guests"]

    with pytest.raises(MissingField) as excinfo:
        validate_booking(payload, [], today=TODAY)

    assert excinfo.value.fields == ["customer_name", "number_of_guests"]
    assert excinfo.value.reason == "Missing required fields: customer_name, number_of_guests"


def test_zero_amounts_count_as_present():
    fields = validate_booking(
        booking_payload("2025-06-20", "2025-06-22", booking_amount=0, advance_amount=0),
        [],
        today=TODAY,
    )

    assert fields.booking_amount == 0.0
    assert fields.advance_amount == 0.0


@pytest.mark.parametrize(
    ("overrides", "field", "reason"),
    [
        ({"customer_name": "A"}, "customer_name", "Customer name must be at least 2 characters long"),
        ({"customer_phone": "12345"}, "customer_phone", "Customer phone must be at least 10 characters long"),
        ({"booking_amount": -5}, "booking_amount", "Booking amount must be a positive number"),
        ({"booking_amount": True}, "booking_amount", "Booking amount must be a positive number"),
        ({"booking_amount": 10**400}, "booking_amount", "Booking amount must be a positive number"),
        ({"number_of_guests": 10**400}, "number_of_guests", "Number of guests must be at least 1"),
        ({"advance_amount": "lots"}, "advance_amount", "Advance amount must be a positive number"),
        ({"number_of_guests": 0}, "number_of_guests", "Number of guests must be at least 1"),
        ({"number_of_guests": 1.5}, "number_of_guests", "Number of guests must be at least 1"),
    ],
)
def test_invalid_field_values(overrides, field, reason):
    with pytest.raises(InvalidFieldValue) as excinfo:
        validate_booking(booking_payload("2025-06-20", "2025-06-22", **overrides), [], today=TODAY)

    assert excinfo.value.field == field
    assert excinfo.value.reason == reason


def test_unparseable_dates_are_rejected():
    with pytest.raises(InvalidDate) as excinfo:
        validate_booking(booking_payload("not-a-date", "2025-06-22"), [], today=TODAY)
    assert excinfo.value.reason == "Invalid check-in date format"

    with pytest.raises(InvalidDate) as excinfo:
        validate_booking(booking_payload("2025-06-20", "2025-02-30"), [], today=TODAY)
    assert excinfo.value.reason == "Invalid check-out date format"


def test_values_are_trimmed_and_coerced():
    payload = booking_payload(
        "2025-06-20",
        "2025-06-22",
        customer_name="  Meera Nair ",
        customer_phone=" 9876543210 ",
        booking_amount="450.50",
        advance_amount=50,
        number_of_guests="4",
    )

    record = validate_booking(payload, [], today=TODAY).to_record()

    assert record == {
        "checkin_date": "2025-06-20",
        "checkout_date": "2025-06-22",
        "customer_name": "Meera Nair",
        "customer_phone": "9876543210",
        "booking_amount": 450.5,
        "advance_amount": 50.0,
        "number_of_guests": 4,
    }


def test_parse_date_accepts_timestamps():
    assert parse_date("2025-06-10T00:00:00.000Z") == date(2025, 6, 10)
    assert parse_date(date(2025, 6, 10)) == date(2025, 6, 10)
    assert parse_date(20250610) is None


def test_calendar_nights_free_the_checkout_day():
    existing = _existing()

    assert is_night_booked(date(2025, 6, 10), existing)
    assert is_night_booked(date(2025, 6, 11), existing)
    assert not is_night_booked(date(2025, 6, 12), existing)
    assert not is_night_booked(date(2025, 6, 11), existing, exclude_id="recA")
    assert booked_nights(existing, date(2025, 6, 9), date(2025, 6, 14)) == [
        date(2025, 6, 10),
        date(2025, 6, 11),
    ]


def test_find_conflict_skips_rows_with_unreadable_dates():
    existing = [booking_row("recBad", "garbage", "2025-06-12")] + _existing()

    conflict = find_conflict(date(2025, 6, 11), date(2025, 6, 12), existing)

    assert conflict["id"] == "recA"


def test_find_overlapping_pairs_reports_stored_conflicts():
    stored = [
        booking_row("recA", "2025-06-10", "2025-06-12"),
        booking_row("recB", "2025-06-12", "2025-06-14"),
        booking_row("recC", "2025-06-13", "2025-06-15"),
    ]

    pairs = find_overlapping_pairs(stored)

    assert [(a["id"], b["id"]) for a, b in pairs] == [("recB", "recC")]
    assert find_overlapping_pairs(stored[:2]) == []
