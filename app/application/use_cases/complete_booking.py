import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.vehicle_repo import VehicleRepo
from app.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from app.domain.errors import ForbiddenError, InvalidStateError, NotFoundError


class CompleteBookingUseCase:
    """El dueño marca como terminada una renta aprobada y pagada."""

    def __init__(
        self,
        booking_repo: BookingRepo,
        vehicle_repo: VehicleRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._vehicle_repo = vehicle_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, booking_id: str, owner_id: str) -> Booking:
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get(booking_id)
            if not booking:
                raise NotFoundError("Reserva", booking_id)
            vehicle = await self._vehicle_repo.get(booking.vehicle_id)
            if not vehicle:
                raise NotFoundError("Vehículo", booking.vehicle_id)
            if not vehicle.is_owned_by(owner_id):
                raise ForbiddenError(owner_id, "completar reservas de este vehículo")

            booking.complete()
            now = self._clock.now_naive()
            updated = await self._booking_repo.update_status(
                booking_id,
                expected=[BookingStatus.APPROVED],
                target=BookingStatus.COMPLETED,
                now=now,
                require_payment_status=[PaymentStatus.PAID],
            )
            if not updated:
                current = await self._booking_repo.get(booking_id)
                raise InvalidStateError(
                    current.status.value if current else "unknown",
                    BookingStatus.APPROVED.value,
                    "completar",
                )
            booking.updated_at = now

        self._logger.info("Booking completed", extra={"booking_id": booking_id})
        return booking
