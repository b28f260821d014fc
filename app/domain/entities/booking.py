"""Entidad Booking - Agregado raíz del dominio."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from app.domain.errors import InvalidStateError
from app.domain.value_objects.date_range import DateRange


class BookingStatus(str, Enum):
    """Estados del ciclo de vida de una reserva."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    """Estados de pago de una reserva."""

    UNPAID = "unpaid"
    PAID = "paid"
    FAILED = "failed"


# Transiciones permitidas del ciclo de vida; rejected, cancelled y completed son terminales.
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED}
    ),
    BookingStatus.APPROVED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}


@dataclass
class Booking:
    """
    Entidad principal del dominio - Agregado Raíz.

    Representa una solicitud/acuerdo de renta de un vehículo entre un
    arrendatario y el dueño del vehículo. Todas las fechas son UTC naive.
    """

    # Identificadores
    id: str
    vehicle_id: str
    renter_id: str

    # Rango [start_at, end_at)
    start_at: datetime
    end_at: datetime

    # Fijado al crear: ceil(días) * tarifa diaria, mínimo un día
    total_price: int

    # Estados
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID

    # Ubicaciones opcionales
    pickup_location: str | None = None
    return_location: str | None = None

    # Pago
    order_ref: str | None = None
    transaction_key: str | None = None
    approved_at: datetime | None = None

    # Timestamps
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # === Propiedades calculadas ===

    @property
    def date_range(self) -> DateRange:
        """Retorna el rango de la reserva como Value Object."""
        return DateRange(start=self.start_at, end=self.end_at)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    def overlaps(self, other: "Booking | DateRange") -> bool:
        """Verifica si el rango de esta reserva se superpone con otro."""
        other_range = other.date_range if isinstance(other, Booking) else other
        return self.date_range.overlaps_with(other_range)

    # === Métodos de negocio ===

    def transition_to(self, target: BookingStatus, operation: str) -> None:
        """
        Aplica una transición del ciclo de vida.

        Raises:
            InvalidStateError: Si la transición no está permitida desde el estado actual.
        """
        if target not in ALLOWED_TRANSITIONS[self.status]:
            expected = [
                status.value
                for status, targets in ALLOWED_TRANSITIONS.items()
                if target in targets
            ]
            raise InvalidStateError(self.status.value, expected, operation)
        self.status = target

    def approve(self) -> None:
        self.transition_to(BookingStatus.APPROVED, "aprobar")

    def reject(self) -> None:
        self.transition_to(BookingStatus.REJECTED, "rechazar")

    def cancel(self) -> None:
        """Cancela la reserva; una reserva pagada requiere el proceso de reembolso."""
        if self.payment_status == PaymentStatus.PAID:
            raise InvalidStateError(self.payment_status.value, "unpaid", "cancelar")
        self.transition_to(BookingStatus.CANCELLED, "cancelar")

    def complete(self) -> None:
        """Marca la renta como terminada; exige que el pago esté confirmado."""
        if self.payment_status != PaymentStatus.PAID:
            raise InvalidStateError(self.payment_status.value, "paid", "completar")
        self.transition_to(BookingStatus.COMPLETED, "completar")
