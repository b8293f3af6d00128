"""Create, edit and delete bookings against the store.

Each write re-reads the whole booking set right before persisting. The read
and the write are not atomic: two concurrent writers can both pass the overlap
check. That race is accepted for a single-property tool and surfaced through
``report_stored_overlaps`` instead of being guarded by the store.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from app.crud.booking import BookingRepository, StorageError
from app.services.booking_rules import (
    BookingValidationError,
    InvalidFieldValue,
    find_overlapping_pairs,
    validate_booking,
)

logger = logging.getLogger(__name__)


class BookingNotFound(Exception):
    def __init__(self, booking_id: str):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


def _require_id(booking_id: str | None) -> str:
    if not booking_id or not booking_id.strip():
        raise InvalidFieldValue("id", "Booking ID is required")
    return booking_id.strip()


async def _snapshot(repo: BookingRepository, failure: str) -> list[dict]:
    """Fresh read of every booking; a storage error surfaces as ``failure``."""
    try:
        return await repo.list_all()
    except StorageError as exc:
        raise StorageError(failure) from exc


async def create_booking(
    repo: BookingRepository,
    payload: Mapping[str, Any],
    *,
    today: date | None = None,
) -> dict:
    existing = await _snapshot(repo, "Failed to create booking")
    fields = validate_booking(payload, existing, check_past=True, today=today)
    booking = await repo.create(fields.to_record())
    logger.info(
        "Created booking %s for %s to %s",
        booking.get("id"), fields.checkin_date, fields.checkout_date,
    )
    return booking


async def update_booking(
    repo: BookingRepository,
    booking_id: str,
    payload: Mapping[str, Any],
) -> dict:
    booking_id = _require_id(booking_id)
    existing = await _snapshot(repo, "Failed to update booking")
    if not any(row.get("id") == booking_id for row in existing):
        raise BookingNotFound(booking_id)

    fields = validate_booking(payload, existing, exclude_id=booking_id, check_past=False)
    updated = await repo.update(booking_id, fields.to_record())
    if updated is None:
        raise BookingNotFound(booking_id)
    logger.info("Updated booking %s", booking_id)
    return updated


async def delete_booking(repo: BookingRepository, booking_id: str) -> None:
    booking_id = _require_id(booking_id)
    if not await repo.delete(booking_id):
        raise BookingNotFound(booking_id)
    logger.info("Deleted booking %s", booking_id)


async def check_availability(
    repo: BookingRepository,
    payload: Mapping[str, Any],
    *,
    exclude_id: str | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """Advisory check for the booking form. Nothing is written."""
    existing = await repo.list_all()
    try:
        validate_booking(
            payload,
            existing,
            exclude_id=exclude_id,
            check_past=exclude_id is None,
            today=today,
        )
    except BookingValidationError as exc:
        return {"available": False, "code": exc.code, "reason": exc.reason}
    return {"available": True, "code": None, "reason": None}


def report_stored_overlaps(bookings: list[dict]) -> int:
    """Log stored bookings that overlap (left behind by concurrent writes)."""
    pairs = find_overlapping_pairs(bookings)
    for first, second in pairs:
        logger.warning(
            "Stored bookings %s and %s overlap", first.get("id"), second.get("id")
        )
    return len(pairs)
