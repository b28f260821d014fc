from datetime import datetime
from typing import Sequence

from app.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from app.domain.value_objects.date_range import DateRange


class BookingRepo:
    async def get(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    async def get_by_order_ref(self, order_ref: str) -> Booking | None:
        raise NotImplementedError

    async def create(self, booking: Booking) -> None:
        raise NotImplementedError

    async def list_approved_for_vehicle(
        self,
        vehicle_id: str,
        exclude_booking_id: str | None = None,
    ) -> Sequence[Booking]:
        raise NotImplementedError

    async def list_pending_overlapping(
        self,
        vehicle_id: str,
        date_range: DateRange,
        exclude_booking_id: str,
    ) -> Sequence[Booking]:
        raise NotImplementedError

    async def list_by_renter(self, renter_id: str) -> Sequence[Booking]:
        raise NotImplementedError

    async def list_by_owner(self, owner_id: str) -> Sequence[Booking]:
        raise NotImplementedError

    async def approve(self, booking: Booking, now: datetime) -> bool:
        """
        Aprueba una reserva pendiente de forma serializada por vehículo.

        Returns:
            False si la reserva ya no estaba pendiente (otra escritura ganó).

        Raises:
            ConflictError: Si existe otra reserva aprobada que se solapa.
        """
        raise NotImplementedError

    async def update_status(
        self,
        booking_id: str,
        expected: Sequence[BookingStatus],
        target: BookingStatus,
        now: datetime,
        require_payment_status: Sequence[PaymentStatus] | None = None,
    ) -> bool:
        """Actualización condicional del ciclo de vida; False si no afectó filas."""
        raise NotImplementedError

    async def assign_order_ref(self, booking_id: str, order_ref: str, now: datetime) -> bool:
        """
        Liga una nueva referencia de orden a una reserva aprobada y no pagada.

        Un pago fallido se rearma a unpaid: la falla pertenecía a la orden anterior.
        """
        raise NotImplementedError

    async def transition_payment(
        self,
        booking_id: str,
        order_ref: str,
        target: PaymentStatus,
        now: datetime,
        transaction_key: str | None = None,
        approved_at: datetime | None = None,
    ) -> bool:
        """
        Única transición de pago permitida: unpaid -> paid | failed.

        Se ejecuta como un UPDATE condicional sobre payment_status = unpaid y,
        para paid, también sobre status = approved. False significa que otra
        entrega ya concilió la reserva o que dejó de estar aprobada.
        """
        raise NotImplementedError
