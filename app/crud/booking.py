from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx
from postgrest.exceptions import APIError
from supabase import Client

logger = logging.getLogger(__name__)

STORAGE_ERRORS = (APIError, httpx.HTTPError)


class StorageError(Exception):
    """The booking store could not be reached or refused the request."""


class BookingRepository(Protocol):
    async def list_all(self) -> list[dict]: ...

    async def get(self, booking_id: str) -> dict | None: ...

    async def create(self, fields: dict[str, Any]) -> dict: ...

    async def update(self, booking_id: str, fields: dict[str, Any]) -> dict | None: ...

    async def delete(self, booking_id: str) -> bool: ...


class SupabaseBookingRepository:
    """Bookings kept in a single Supabase table, one row per stay."""

    def __init__(self, client: Client, table: str = "bookings"):
        self.client = client
        self.table = table

    async def list_all(self) -> list[dict]:
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .order("checkin_date")
                .execute()
            )
        except STORAGE_ERRORS as exc:
            logger.exception("Error fetching bookings")
            raise StorageError("Failed to fetch bookings") from exc
        return response.data or []

    async def get(self, booking_id: str) -> dict | None:
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .eq("id", booking_id)
                .limit(1)
                .execute()
            )
        except STORAGE_ERRORS as exc:
            logger.exception("Error fetching booking %s", booking_id)
            raise StorageError("Failed to fetch bookings") from exc
        if not response.data:
            return None
        return response.data[0]

    async def create(self, fields: dict[str, Any]) -> dict:
        insert_data = {**fields, "created_at": datetime.now(timezone.utc).isoformat()}
        try:
            response = self.client.table(self.table).insert(insert_data).execute()
        except STORAGE_ERRORS as exc:
            logger.exception("Error creating booking")
            raise StorageError("Failed to create booking") from exc
        if not response.data:
            raise StorageError("Failed to create booking")
        return response.data[0]

    async def update(self, booking_id: str, fields: dict[str, Any]) -> dict | None:
        data = {k: v for k, v in fields.items() if k not in ("id", "created_at")}
        try:
            response = (
                self.client.table(self.table)
                .update(data)
                .eq("id", booking_id)
                .execute()
            )
        except STORAGE_ERRORS as exc:
            logger.exception("Error updating booking %s", booking_id)
            raise StorageError("Failed to update booking") from exc
        if not response.data:
            return None
        return response.data[0]

    async def delete(self, booking_id: str) -> bool:
        try:
            response = (
                self.client.table(self.table)
                .delete()
                .eq("id", booking_id)
                .execute()
            )
        except STORAGE_ERRORS as exc:
            logger.exception("Error deleting booking %s", booking_id)
            raise StorageError("Failed to delete booking") from exc
        return bool(response.data)
