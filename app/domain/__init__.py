"""
Capa de Dominio - Motor de reservas y conciliación de pagos.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.
Incluye entidades, value objects y excepciones de dominio.

Estructura:
- entities/: Entidades del dominio (Booking, Vehicle, PaymentEvent)
- value_objects/: Objetos de valor inmutables (DateRange, OrderRef)
- errors.py: Excepciones específicas del dominio
"""

from app.domain.entities import (
    Booking,
    BookingStatus,
    PaymentAnomaly,
    PaymentEvent,
    PaymentEventKind,
    PaymentEventSource,
    PaymentStatus,
    ReconcileOutcome,
    ReconcileResult,
    Vehicle,
    VehicleStatus,
)
from app.domain.errors import (
    AlreadyPaidError,
    AmountMismatchError,
    ConflictError,
    DomainError,
    ForbiddenError,
    InvalidPayloadError,
    InvalidRangeError,
    InvalidSignatureError,
    InvalidStateError,
    NotFoundError,
    PaymentGatewayError,
    UnauthenticatedError,
)
from app.domain.value_objects import DateRange, OrderRef

__all__ = [
    # Entities
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "Vehicle",
    "VehicleStatus",
    "PaymentEvent",
    "PaymentEventKind",
    "PaymentEventSource",
    "PaymentAnomaly",
    "ReconcileOutcome",
    "ReconcileResult",
    # Value Objects
    "DateRange",
    "OrderRef",
    # Errors
    "DomainError",
    "NotFoundError",
    "ForbiddenError",
    "InvalidStateError",
    "InvalidRangeError",
    "ConflictError",
    "AmountMismatchError",
    "AlreadyPaidError",
    "PaymentGatewayError",
    "UnauthenticatedError",
    "InvalidSignatureError",
    "InvalidPayloadError",
]
