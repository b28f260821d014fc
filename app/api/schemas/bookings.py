from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator

from app.domain.entities.booking import Booking


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class CreateBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vehicle_id: constr(strip_whitespace=True, min_length=1, max_length=36)
    start_at: datetime
    end_at: datetime
    pickup_location: constr(strip_whitespace=True, max_length=255) | None = None
    return_location: constr(strip_whitespace=True, max_length=255) | None = None

    @field_validator("start_at", "end_at")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class BookingResponse(BaseModel):
    id: str
    vehicle_id: str
    renter_id: str
    start_at: datetime
    end_at: datetime
    total_price: int
    status: str
    payment_status: str
    pickup_location: str | None = None
    return_location: str | None = None
    order_ref: str | None = None
    approved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            vehicle_id=booking.vehicle_id,
            renter_id=booking.renter_id,
            start_at=booking.start_at,
            end_at=booking.end_at,
            total_price=booking.total_price,
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            pickup_location=booking.pickup_location,
            return_location=booking.return_location,
            order_ref=booking.order_ref,
            approved_at=booking.approved_at,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class ApproveBookingResponse(BaseModel):
    booking: BookingResponse
    rejected_booking_ids: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class RejectCompetingResponse(BaseModel):
    booking_id: str
    rejected_booking_ids: list[str]


class AvailabilityResponse(BaseModel):
    vehicle_id: str
    start: datetime
    end: datetime
    available: bool
