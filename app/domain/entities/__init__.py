"""Entidades del dominio de reservas."""

from app.domain.entities.booking import (
    ALLOWED_TRANSITIONS,
    Booking,
    BookingStatus,
    PaymentStatus,
)
from app.domain.entities.payment_event import (
    PaymentAnomaly,
    PaymentEvent,
    PaymentEventKind,
    PaymentEventSource,
    ReconcileOutcome,
    ReconcileResult,
)
from app.domain.entities.vehicle import Vehicle, VehicleStatus

__all__ = [
    # Booking
    "ALLOWED_TRANSITIONS",
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    # Vehicle
    "Vehicle",
    "VehicleStatus",
    # PaymentEvent
    "PaymentAnomaly",
    "PaymentEvent",
    "PaymentEventKind",
    "PaymentEventSource",
    "ReconcileOutcome",
    "ReconcileResult",
]
