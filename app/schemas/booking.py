from __future__ import annotations

from datetime import date, datetime

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    computed_field,
)

# Raw form values; the booking rules decide what is acceptable.
FormValue = StrictStr | StrictInt | StrictFloat | StrictBool | None


class BookingPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    checkin_date: FormValue = None
    checkout_date: FormValue = None
    customer_name: FormValue = None
    customer_phone: FormValue = None
    booking_amount: FormValue = None
    advance_amount: FormValue = None
    number_of_guests: FormValue = None


class BookingResponse(BaseModel):
    id: str
    checkin_date: date
    checkout_date: date
    customer_name: str
    customer_phone: str
    booking_amount: float
    advance_amount: float
    number_of_guests: int
    created_at: datetime

    @computed_field
    @property
    def nights(self) -> int:
        return (self.checkout_date - self.checkin_date).days

    @computed_field
    @property
    def remaining_amount(self) -> float:
        return self.booking_amount - self.advance_amount


class BookingDeleteResponse(BaseModel):
    message: str = "Booking deleted successfully"


class AvailabilityResponse(BaseModel):
    available: bool
    code: str | None = None
    reason: str | None = None


class CalendarResponse(BaseModel):
    start: date
    end: date
    booked_nights: list[date]


class MonthStats(BaseModel):
    total_bookings: int
    total_revenue: float
    total_nights: int
    average_nights: int


class MonthOverview(BaseModel):
    month: str
    label: str
    variant: str
    bookings: list[BookingResponse]
    stats: MonthStats


class MonthlyOverviewResponse(BaseModel):
    months: list[MonthOverview]
