import logging
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api import deps
from app.crud.booking import BookingRepository, StorageError
from app.schemas.booking import (
    AvailabilityResponse,
    BookingDeleteResponse,
    BookingPayload,
    BookingResponse,
    CalendarResponse,
    MonthlyOverviewResponse,
)
from app.services import booking_service
from app.services.booking_rules import (
    BookingValidationError,
    OverlapConflict,
    booked_nights,
)
from app.services.monthly import add_months, monthly_overview, parse_month

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])

MAX_CALENDAR_DAYS = 366


def _storage_failure(exc: StorageError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc) or "Internal server error",
    )


def _rejected(exc: BookingValidationError) -> HTTPException:
    if isinstance(exc, OverlapConflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.reason)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.reason)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")


async def _list_bookings(repo: BookingRepository) -> list[dict]:
    try:
        return await repo.list_all()
    except StorageError as exc:
        raise _storage_failure(exc)


@router.get("", response_model=list[BookingResponse])
async def list_bookings(
    current_user: dict = Depends(deps.get_current_user),
    repo: BookingRepository = Depends(deps.get_booking_repository),
):
    """All bookings, ordered by check-in date."""
    rows = await _list_bookings(repo)
    booking_service.report_stored_overlaps(rows)
    return rows


@router.get("/overview", response_model=MonthlyOverviewResponse)
async def get_monthly_overview(
    month: str | None = Query(None, description="Anchor month as YYYY-MM; defaults to this month"),
    current_user: dict = Depends(deps.get_current_user),
    repo: BookingRepository = Depends(deps.get_booking_repository),
):
    """Bookings and totals for the previous, current and next month."""
    try:
        anchor = parse_month(month) if month else date.today()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    rows = await _list_bookings(repo)
    try:
        months = monthly_overview(rows, anchor)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return MonthlyOverviewResponse(months=months)


@router.get("/calendar", response_model=CalendarResponse)
async def get_booked_calendar(
    start: date | None = Query(None, description="First day shown; defaults to the start of this month"),
    end: date | None = Query(None, description="Day after the last day shown"),
    exclude_id: str | None = Query(None, description="Booking being edited"),
    current_user: dict = Depends(deps.get_current_user),
    repo: BookingRepository = Depends(deps.get_booking_repository),
):
    """Nights that are already taken, for greying out calendar days."""
    if start is None:
        today = date.today()
        start = date(today.year, today.month, 1)
    if end is None:
        try:
            end = add_months(date(start.year, start.month, 1), 1)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if end <= start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Calendar end must be after start",
        )
    if end - start > timedelta(days=MAX_CALENDAR_DAYS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Calendar range cannot exceed {MAX_CALENDAR_DAYS} days",
        )

    rows = await _list_bookings(repo)
    return CalendarResponse(
        start=start,
        end=end,
        booked_nights=booked_nights(rows, start, end, exclude_id=exclude_id),
    )


@router.post("/availability", response_model=AvailabilityResponse)
async def check_booking_availability(
    payload: BookingPayload,
    exclude_id: str | None = Query(None, description="Booking being edited"),
    current_user: dict = Depends(deps.get_current_user),
    repo: BookingRepository = Depends(deps.get_booking_repository),
):
    """Run the admission checks on form values without saving anything."""
    try:
        return await booking_service.check_availability(
            repo, payload.model_dump(), exclude_id=exclude_id
        )
    except StorageError as exc:
        raise _storage_failure(exc)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_new_booking(
    payload: BookingPayload,
    current_user: dict = Depends(deps.get_current_user),
    repo: BookingRepository = Depends(deps.get_booking_repository),
):
    """Create a booking after validating it against every stored booking."""
    try:
        return await booking_service.create_booking(repo, payload.model_dump())
    except BookingValidationError as exc:
        raise _rejected(exc)
    except StorageError as exc:
        raise _storage_failure(exc)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_single_booking(
    booking_id: str,
    current_user: dict = Depends(deps.get_current_user),
    repo: BookingRepository = Depends(deps.get_booking_repository),
):
    try:
        booking = await repo.get(booking_id)
    except StorageError as exc:
        raise _storage_failure(exc)
    if booking is None:
        raise _not_found()
    return booking


@router.put("/{booking_id}", response_model=BookingResponse)
async def update_existing_booking(
    booking_id: str,
    payload: BookingPayload,
    current_user: dict = Depends(deps.get_current_user),
    repo: BookingRepository = Depends(deps.get_booking_repository),
):
    """Replace every field of a booking except its id and creation time."""
    try:
        return await booking_service.update_booking(repo, booking_id, payload.model_dump())
    except booking_service.BookingNotFound:
        raise _not_found()
    except BookingValidationError as exc:
        raise _rejected(exc)
    except StorageError as exc:
        raise _storage_failure(exc)


@router.delete("/{booking_id}", response_model=BookingDeleteResponse)
async def delete_existing_booking(
    booking_id: str,
    current_user: dict = Depends(deps.get_current_user),
    repo: BookingRepository = Depends(deps.get_booking_repository),
):
    try:
        await booking_service.delete_booking(repo, booking_id)
    except booking_service.BookingNotFound:
        raise _not_found()
    except BookingValidationError as exc:
        raise _rejected(exc)
    except StorageError as exc:
        raise _storage_failure(exc)
    return BookingDeleteResponse()
