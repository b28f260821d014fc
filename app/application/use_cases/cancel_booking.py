import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from app.domain.errors import ForbiddenError, InvalidStateError, NotFoundError

CANCELLABLE_STATUSES = [BookingStatus.PENDING, BookingStatus.APPROVED]


class CancelBookingUseCase:
    """
    Cancelación por parte del arrendatario.

    Una reserva pagada no se cancela aquí: requiere el proceso de reembolso.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, booking_id: str, renter_id: str) -> Booking:
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get(booking_id)
            if not booking:
                raise NotFoundError("Reserva", booking_id)
            if booking.renter_id != renter_id:
                raise ForbiddenError(renter_id, "cancelar esta reserva")

            booking.cancel()
            now = self._clock.now_naive()
            updated = await self._booking_repo.update_status(
                booking_id,
                expected=CANCELLABLE_STATUSES,
                target=BookingStatus.CANCELLED,
                now=now,
                require_payment_status=[PaymentStatus.UNPAID, PaymentStatus.FAILED],
            )
            if not updated:
                # Un pago confirmado en paralelo gana sobre la cancelación.
                current = await self._booking_repo.get(booking_id)
                if current and current.is_paid:
                    raise InvalidStateError(current.payment_status.value, "unpaid", "cancelar")
                raise InvalidStateError(
                    current.status.value if current else "unknown",
                    [status.value for status in CANCELLABLE_STATUSES],
                    "cancelar",
                )
            booking.updated_at = now

        self._logger.info("Booking cancelled", extra={"booking_id": booking_id})
        return booking
