import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.vehicle_repo import VehicleRepo
from app.domain.entities.booking import Booking, BookingStatus
from app.domain.errors import ForbiddenError, InvalidStateError, NotFoundError


class RejectCompetingBookingsUseCase:
    """
    Segunda fase de la aprobación: rechaza las solicitudes pendientes que
    se solapan con una reserva aprobada.

    Se puede volver a ejecutar sin riesgo: una solicitud que ya no está
    pendiente simplemente se omite.
    """

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

    async def execute(self, booking_id: str, owner_id: str) -> list[str]:
        """Reintento explícito solicitado por el dueño del vehículo."""
        booking = await self._booking_repo.get(booking_id)
        if not booking:
            raise NotFoundError("Reserva", booking_id)
        vehicle = await self._vehicle_repo.get(booking.vehicle_id)
        if not vehicle:
            raise NotFoundError("Vehículo", booking.vehicle_id)
        if not vehicle.is_owned_by(owner_id):
            raise ForbiddenError(owner_id, "gestionar reservas de este vehículo")
        if booking.status != BookingStatus.APPROVED:
            raise InvalidStateError(
                booking.status.value, BookingStatus.APPROVED.value, "rechazar solicitudes en competencia"
            )
        return await self.reject_overlapping(booking)

    async def reject_overlapping(self, approved: Booking) -> list[str]:
        async with self._transaction_manager.start():
            competing = await self._booking_repo.list_pending_overlapping(
                approved.vehicle_id,
                approved.date_range,
                exclude_booking_id=approved.id,
            )
            now = self._clock.now_naive()
            rejected: list[str] = []
            for booking in competing:
                updated = await self._booking_repo.update_status(
                    booking.id,
                    expected=[BookingStatus.PENDING],
                    target=BookingStatus.REJECTED,
                    now=now,
                )
                if updated:
                    rejected.append(booking.id)

        if rejected:
            self._logger.info(
                "Competing pending bookings rejected",
                extra={
                    "approved_booking_id": approved.id,
                    "vehicle_id": approved.vehicle_id,
                    "rejected_booking_ids": rejected,
                },
            )
        return rejected
